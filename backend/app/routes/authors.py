"""
Library API — Authors Route Handlers
======================================

What:  GET/POST/DELETE for /api/authors, with sorting, paging, sparse
       fieldsets, and hypermedia links.
How:   Handlers validate `orderBy` and `fields` with the boolean validators,
       delegate persistence to AuthorService, then shape each AuthorDto and
       attach links built from the paged list's navigation flags.

List response:
    Header  X-Pagination: {"totalCount": 12, "pageSize": 5, "currentPage": 2, "totalPages": 3,
                           "previousPageLink": "...pageNumber=1...", "nextPageLink": "...pageNumber=3..."}
    Body    {
              "value": [{"id": "...", "name": "Stephen King", "links": [...]}, ...],
              "links": [{"rel": "self", ...}, {"rel": "nextPage", ...}, {"rel": "previousPage", ...}]
            }
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.author import Author
from app.schemas.author import AuthorDto, AuthorForCreationDto
from app.schemas.common import ErrorResponse, LinkedCollectionResponse
from app.services.author_service import author_service
from app.services.data_shaping import ShapedEntity, resource_shaper
from app.services.link_builder import LinkBuilder, ResourceAction
from app.services.property_mapping import property_mapping_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authors"])

AUTHORS_TEMPLATE = "/api/authors"
AUTHOR_TEMPLATE = "/api/authors/{id}"
AUTHOR_BOOKS_TEMPLATE = "/api/authors/{id}/books"

AUTHOR_ACTIONS = (
    ResourceAction(rel="delete_author", template=AUTHOR_TEMPLATE, method="DELETE"),
    ResourceAction(rel="create_book_for_author", template=AUTHOR_BOOKS_TEMPLATE, method="POST"),
    ResourceAction(rel="books", template=AUTHOR_BOOKS_TEMPLATE, method="GET"),
)


def author_link_builder(request: Request) -> LinkBuilder:
    return LinkBuilder(
        base_url=str(request.base_url),
        item_template=AUTHOR_TEMPLATE,
        collection_template=AUTHORS_TEMPLATE,
    )


def ensure_valid_fields(fields: Optional[str]) -> None:
    if not resource_shaper.type_has_properties(AuthorDto, fields):
        raise ValidationError(message=f"Invalid fields requested: '{fields}'", field="fields")


def linked_author(author: Author, links: LinkBuilder, fields: Optional[str] = None) -> ShapedEntity:
    """Shaped AuthorDto with its `links` slot appended."""
    shaped = resource_shaper.shape(AuthorDto.from_entity(author), fields)
    shaped["links"] = [
        link.model_dump() for link in links.links_for_item(author.id, fields, AUTHOR_ACTIONS)
    ]
    return shaped


@router.get(
    "/authors",
    name="get_authors",
    response_model=LinkedCollectionResponse,
    responses={
        400: {"description": "Unknown sort key or field", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List authors with sorting, paging and data shaping",
)
async def get_authors(
    request: Request,
    response: Response,
    order_by: str = Query(
        default=settings.default_order_by,
        alias="orderBy",
        description="Comma-separated sort keys, each optionally followed by 'desc'",
    ),
    search_query: Optional[str] = Query(default=None, alias="searchQuery"),
    genre: Optional[str] = Query(default=None),
    page_number: int = Query(default=1, alias="pageNumber"),
    page_size: int = Query(default=settings.default_page_size, alias="pageSize"),
    fields: Optional[str] = Query(default=None, description="Comma-separated AuthorDto fields"),
    db: AsyncSession = Depends(get_db_session),
) -> LinkedCollectionResponse:
    if not property_mapping_registry.is_valid_sort_expression(AuthorDto, Author, order_by):
        raise ValidationError(message=f"Invalid orderBy expression: '{order_by}'", field="orderBy")
    ensure_valid_fields(fields)

    page_size = min(page_size, settings.max_page_size)
    authors = await author_service.list_authors(
        db=db,
        page_number=page_number,
        page_size=page_size,
        order_by=order_by,
        genre=genre,
        search_query=search_query,
    )

    links = author_link_builder(request)
    query_state = {
        "orderBy": order_by,
        "searchQuery": search_query,
        "genre": genre,
        "pageNumber": page_number,
        "pageSize": page_size,
        "fields": fields,
    }
    response.headers["X-Pagination"] = authors.to_metadata(
        previous_page_link=links.page_href(query_state, -1) if authors.has_previous else None,
        next_page_link=links.page_href(query_state, 1) if authors.has_next else None,
    ).to_header()

    return LinkedCollectionResponse(
        value=[linked_author(author, links, fields) for author in authors],
        links=links.links_for_collection(query_state, authors.has_next, authors.has_previous),
    )


@router.get(
    "/authors/{id}",
    name="get_author",
    response_model=Dict[str, Any],
    responses={
        400: {"description": "Unknown field", "model": ErrorResponse},
        404: {"description": "Author not found", "model": ErrorResponse},
    },
    summary="Get a single author, optionally shaped",
)
async def get_author(
    id: UUID,
    request: Request,
    fields: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    ensure_valid_fields(fields)
    author = await author_service.get_author(db, id)
    return linked_author(author, author_link_builder(request), fields)


@router.post(
    "/authors",
    name="create_author",
    status_code=201,
    response_model=Dict[str, Any],
    summary="Create an author together with any nested books",
)
async def create_author(
    body: AuthorForCreationDto,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    author = await author_service.create_author(db, body)
    links = author_link_builder(request)
    created = linked_author(author, links)
    response.headers["Location"] = created["links"][0]["href"]
    return created


@router.post(
    "/authors/{id}",
    name="block_author_creation",
    responses={
        404: {"description": "No author with that id", "model": ErrorResponse},
        409: {"description": "Author already exists", "model": ErrorResponse},
    },
    summary="Reject creating an author at an explicit id",
)
async def block_author_creation(id: UUID, db: AsyncSession = Depends(get_db_session)) -> Response:
    if await author_service.author_exists(db, id):
        raise ConflictError(resource="author", resource_id=str(id))
    raise NotFoundError(resource="author", resource_id=str(id))


@router.delete(
    "/authors/{id}",
    name="delete_author",
    status_code=204,
    responses={404: {"description": "Author not found", "model": ErrorResponse}},
    summary="Delete an author and their books",
)
async def delete_author(id: UUID, db: AsyncSession = Depends(get_db_session)) -> Response:
    await author_service.delete_author(db, id)
    return Response(status_code=204)
