"""
Library API — Book SQLAlchemy Model
=====================================

What:  ORM model for the `books` table; every book belongs to one author.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Book(Base):
    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("authors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    author: Mapped["Author"] = relationship(back_populates="books")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', author_id={self.author_id})>"
