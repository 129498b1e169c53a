"""
Library API — Author SQLAlchemy Model
=======================================

What:  ORM model for the `authors` table.
How:   SQLAlchemy 2.0 typed mappings; Alembic migration 001 mirrors it.

Column names are the storage fields the property mapping registry sorts by
(`first_name`, `last_name`, `date_of_birth`, `genre`, `id`).
"""

import uuid
from datetime import date
from typing import List

from sqlalchemy import Date, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Author(Base):
    """
    A book author.

    Query Patterns:
        - Page of authors: ORDER BY <mapped sort fields> OFFSET :o LIMIT :n
        - Filter by genre: WHERE lower(genre) = :genre
        - Search: WHERE lower(first_name|last_name|genre) LIKE :q
    """

    __tablename__ = "authors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    genre: Mapped[str] = mapped_column(String(50), nullable=False)

    # Books go with their author
    books: Mapped[List["Book"]] = relationship(  # noqa: F821
        back_populates="author",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_authors_name", "first_name", "last_name"),
    )

    def __repr__(self) -> str:
        return f"<Author(id={self.id}, name='{self.first_name} {self.last_name}')>"
