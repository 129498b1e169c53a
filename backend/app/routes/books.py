"""
Library API — Books Route Handlers
====================================

What:  CRUD for /api/authors/{author_id}/books, each book carrying its
       self/delete/update links.
"""

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.book import Book
from app.schemas.book import BookDto, BookForCreationDto, BookForUpdateDto
from app.schemas.common import ErrorResponse, LinkedCollectionResponse
from app.services.book_service import book_service
from app.services.link_builder import LinkBuilder, ResourceAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/authors/{author_id}", tags=["Books"])

BOOKS_TEMPLATE = "/api/authors/{author_id}/books"
BOOK_TEMPLATE = "/api/authors/{author_id}/books/{id}"

BOOK_ACTIONS = (
    ResourceAction(rel="delete_book", template=BOOK_TEMPLATE, method="DELETE"),
    ResourceAction(rel="update_book", template=BOOK_TEMPLATE, method="PUT"),
)


def book_link_builder(request: Request, author_id: UUID) -> LinkBuilder:
    return LinkBuilder(
        base_url=str(request.base_url),
        item_template=BOOK_TEMPLATE,
        collection_template=BOOKS_TEMPLATE,
        path_params={"author_id": author_id},
    )


def linked_book(book: Book, links: LinkBuilder) -> Dict[str, Any]:
    body = BookDto.model_validate(book).model_dump()
    body["links"] = [link.model_dump() for link in links.links_for_item(book.id, actions=BOOK_ACTIONS)]
    return body


@router.get(
    "/books",
    name="get_books_for_author",
    response_model=LinkedCollectionResponse,
    responses={404: {"description": "Author not found", "model": ErrorResponse}},
    summary="List an author's books",
)
async def get_books_for_author(
    author_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> LinkedCollectionResponse:
    books = await book_service.list_books(db, author_id)
    links = book_link_builder(request, author_id)
    return LinkedCollectionResponse(
        value=[linked_book(book, links) for book in books],
        links=links.links_for_collection({}, has_next=False, has_previous=False),
    )


@router.get(
    "/books/{id}",
    name="get_book_for_author",
    response_model=Dict[str, Any],
    responses={404: {"description": "Author or book not found", "model": ErrorResponse}},
    summary="Get one of an author's books",
)
async def get_book_for_author(
    author_id: UUID,
    id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    book = await book_service.get_book(db, author_id, id)
    return linked_book(book, book_link_builder(request, author_id))


@router.post(
    "/books",
    name="create_book_for_author",
    status_code=201,
    response_model=Dict[str, Any],
    responses={404: {"description": "Author not found", "model": ErrorResponse}},
    summary="Create a book for an author",
)
async def create_book_for_author(
    author_id: UUID,
    body: BookForCreationDto,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    book = await book_service.create_book(db, author_id, body)
    created = linked_book(book, book_link_builder(request, author_id))
    response.headers["Location"] = created["links"][0]["href"]
    return created


@router.put(
    "/books/{id}",
    name="update_book_for_author",
    status_code=204,
    responses={404: {"description": "Author or book not found", "model": ErrorResponse}},
    summary="Replace a book's title and description",
)
async def update_book_for_author(
    author_id: UUID,
    id: UUID,
    body: BookForUpdateDto,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await book_service.update_book(db, author_id, id, body)
    return Response(status_code=204)


@router.delete(
    "/books/{id}",
    name="delete_book_for_author",
    status_code=204,
    responses={404: {"description": "Author or book not found", "model": ErrorResponse}},
    summary="Delete one of an author's books",
)
async def delete_book_for_author(
    author_id: UUID,
    id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await book_service.delete_book(db, author_id, id)
    return Response(status_code=204)
