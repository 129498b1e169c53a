"""
Library API — Author Service
==============================

What:  Author persistence operations: paged listing with mapped sorting,
       lookups, bulk lookups, creation (with nested books), and deletion.
How:   Async SQLAlchemy queries against the Author model. Sort expressions
       are resolved through the property mapping registry into column
       orderings; pages are built from a COUNT(*) query plus OFFSET/LIMIT,
       so the full result set is never materialized.
Who:   Called by the authors and author-collections route handlers.

Error Handling Strategy:
    Application exceptions (NotFoundError, ValidationError) propagate
    unchanged. SQLAlchemy failures are logged and wrapped in DatabaseError
    so the client only sees a generic message.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import DatabaseError, NotFoundError
from app.models.author import Author
from app.models.book import Book
from app.schemas.author import AuthorDto, AuthorForCreationDto
from app.services.paged_list import PagedList
from app.services.property_mapping import (
    PropertyMappingRegistry,
    SortInstruction,
    property_mapping_registry,
)

logger = logging.getLogger(__name__)


def apply_sort(query: Select, instructions: Sequence[SortInstruction]) -> Select:
    """Append one ORDER BY term per instruction, then `id` as a tiebreaker."""
    for instruction in instructions:
        column = getattr(Author, instruction.field)
        query = query.order_by(column.desc() if instruction.effective_descending else column.asc())
    return query.order_by(Author.id.asc())


def apply_filters(
    query: Select,
    genre: Optional[str] = None,
    search_query: Optional[str] = None,
) -> Select:
    if genre and genre.strip():
        query = query.where(func.lower(Author.genre) == genre.strip().lower())
    if search_query and search_query.strip():
        term = search_query.strip()
        query = query.where(
            or_(
                Author.genre.icontains(term, autoescape=True),
                Author.first_name.icontains(term, autoescape=True),
                Author.last_name.icontains(term, autoescape=True),
            )
        )
    return query


def _entity_from_dto(dto: AuthorForCreationDto) -> Author:
    return Author(
        first_name=dto.first_name,
        last_name=dto.last_name,
        date_of_birth=dto.date_of_birth,
        genre=dto.genre,
        books=[Book(title=book.title, description=book.description) for book in dto.books],
    )


class AuthorService:
    """
    Stateless author operations; each call receives the request's session.

    Args:
        registry: Property mapping registry used to resolve `orderBy`.
    """

    def __init__(self, registry: PropertyMappingRegistry = property_mapping_registry):
        self.registry = registry

    async def list_authors(
        self,
        db: AsyncSession,
        page_number: int = 1,
        page_size: int = 10,
        order_by: Optional[str] = "Name",
        genre: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> PagedList[Author]:
        """
        One page of authors, filtered and sorted.

        Raises:
            ValidationError: bad page parameters or unmapped sort key
                (callers validate first, so this means validation was skipped).
            DatabaseError: a query failed.
        """
        instructions = self.registry.resolve_sort_expression(AuthorDto, Author, order_by)
        # Validate paging before touching the database
        PagedList([], 0, page_number, page_size)

        filtered = apply_filters(select(Author), genre=genre, search_query=search_query)
        try:
            count_result = await db.execute(
                select(func.count()).select_from(filtered.subquery())
            )
            total_count = count_result.scalar() or 0

            page_query = (
                apply_sort(filtered, instructions)
                .offset((page_number - 1) * page_size)
                .limit(page_size)
            )
            result = await db.execute(page_query)
            authors = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing authors: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve authors. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.debug(
            "Listed authors page=%d size=%d total=%d order_by=%r",
            page_number, page_size, total_count, order_by,
        )
        return PagedList(authors, total_count, page_number, page_size)

    async def get_author(self, db: AsyncSession, author_id: UUID, with_books: bool = False) -> Author:
        """
        Raises:
            NotFoundError: no author with that id.
        """
        query = select(Author).where(Author.id == author_id)
        if with_books:
            query = query.options(selectinload(Author.books))
        try:
            result = await db.execute(query)
            author = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching author %s: %s", author_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the author. Please try again.",
                context={"author_id": str(author_id)},
            )
        if author is None:
            raise NotFoundError(resource="author", resource_id=str(author_id))
        return author

    async def author_exists(self, db: AsyncSession, author_id: UUID) -> bool:
        try:
            result = await db.execute(select(Author.id).where(Author.id == author_id))
        except SQLAlchemyError as e:
            logger.error("Database error checking author %s: %s", author_id, str(e))
            raise DatabaseError(context={"author_id": str(author_id)})
        return result.scalar_one_or_none() is not None

    async def get_authors_by_ids(self, db: AsyncSession, author_ids: Sequence[UUID]) -> List[Author]:
        """Authors for the given ids, in the order the ids were given."""
        try:
            result = await db.execute(select(Author).where(Author.id.in_(list(author_ids))))
            found = {author.id: author for author in result.scalars().all()}
        except SQLAlchemyError as e:
            logger.error("Database error fetching author collection: %s", str(e))
            raise DatabaseError(
                message="Could not retrieve the authors. Please try again.",
                context={"count": len(author_ids)},
            )
        return [found[author_id] for author_id in author_ids if author_id in found]

    async def create_author(self, db: AsyncSession, dto: AuthorForCreationDto) -> Author:
        return (await self.create_authors(db, [dto]))[0]

    async def create_authors(self, db: AsyncSession, dtos: Sequence[AuthorForCreationDto]) -> List[Author]:
        """
        Add authors (and their nested books) in one flush.

        Raises:
            DatabaseError: the save failed; nothing is returned partially.
        """
        authors = [_entity_from_dto(dto) for dto in dtos]
        try:
            db.add_all(authors)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Creating %d author(s) failed on save: %s", len(authors), str(e))
            raise DatabaseError(
                message="Creating an author failed on save.",
                context={"count": len(authors), "error_type": type(e).__name__},
            )
        logger.info("Created %d author(s)", len(authors))
        return authors

    async def delete_author(self, db: AsyncSession, author_id: UUID) -> None:
        author = await self.get_author(db, author_id, with_books=True)
        try:
            await db.delete(author)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Deleting author %s failed on save: %s", author_id, str(e))
            raise DatabaseError(
                message=f"Deleting author {author_id} failed on save.",
                context={"author_id": str(author_id)},
            )
        logger.info("Deleted author %s", author_id)


# ── Singleton Instance ────────────────────────────────────────────────────
author_service = AuthorService()
