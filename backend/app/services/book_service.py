"""
Library API — Book Service
============================

What:  CRUD for books scoped to their author.
How:   Every operation first confirms the author exists, so a missing
       author and a missing book both surface as NotFoundError (404).
Who:   Called by the books route handlers.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.book import Book
from app.schemas.book import BookForCreationDto, BookForUpdateDto
from app.services.author_service import AuthorService, author_service

logger = logging.getLogger(__name__)


class BookService:

    def __init__(self, authors: AuthorService = author_service):
        self.authors = authors

    async def _ensure_author(self, db: AsyncSession, author_id: UUID) -> None:
        if not await self.authors.author_exists(db, author_id):
            raise NotFoundError(resource="author", resource_id=str(author_id))

    async def list_books(self, db: AsyncSession, author_id: UUID) -> List[Book]:
        await self._ensure_author(db, author_id)
        try:
            result = await db.execute(
                select(Book).where(Book.author_id == author_id).order_by(Book.title, Book.id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing books for %s: %s", author_id, str(e))
            raise DatabaseError(context={"author_id": str(author_id)})
        return list(result.scalars().all())

    async def get_book(self, db: AsyncSession, author_id: UUID, book_id: UUID) -> Book:
        await self._ensure_author(db, author_id)
        try:
            result = await db.execute(
                select(Book).where(Book.author_id == author_id, Book.id == book_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching book %s: %s", book_id, str(e))
            raise DatabaseError(context={"book_id": str(book_id)})
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        return book

    async def create_book(self, db: AsyncSession, author_id: UUID, dto: BookForCreationDto) -> Book:
        await self._ensure_author(db, author_id)
        book = Book(author_id=author_id, title=dto.title, description=dto.description)
        await self._save(db, book, f"Creating a book for author {author_id} failed on save.")
        logger.info("Created book %s for author %s", book.id, author_id)
        return book

    async def update_book(
        self,
        db: AsyncSession,
        author_id: UUID,
        book_id: UUID,
        dto: BookForUpdateDto,
    ) -> Book:
        book = await self.get_book(db, author_id, book_id)
        book.title = dto.title
        book.description = dto.description
        await self._save(db, book, f"Updating book {book_id} for author {author_id} failed on save.")
        return book

    async def delete_book(self, db: AsyncSession, author_id: UUID, book_id: UUID) -> None:
        book = await self.get_book(db, author_id, book_id)
        try:
            await db.delete(book)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Deleting book %s failed on save: %s", book_id, str(e))
            raise DatabaseError(
                message=f"Deleting book {book_id} for author {author_id} failed on save.",
                context={"book_id": str(book_id)},
            )
        logger.info("Deleted book %s", book_id)

    @staticmethod
    async def _save(db: AsyncSession, book: Book, failure_message: str) -> None:
        try:
            db.add(book)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("%s %s", failure_message, str(e))
            raise DatabaseError(message=failure_message, context={"error_type": type(e).__name__})


# ── Singleton Instance ────────────────────────────────────────────────────
book_service = BookService()
