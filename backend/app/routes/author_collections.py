"""
Library API — Author Collections Route Handlers
=================================================

What:  Bulk creation of authors and retrieval of a set of authors by id.
How:   Ids travel in the path as a parenthesized, comma-separated list:
           GET /api/authorcollections/(3f2c…,9a41…)
       A malformed or empty list is a 400; if any id is unknown the whole
       request is a 404.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError, ValidationError
from app.schemas.author import AuthorDto, AuthorForCreationDto
from app.schemas.common import ErrorResponse
from app.services.author_service import author_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Author Collections"])


def parse_ids(raw: str) -> List[UUID]:
    """Comma-separated UUID list → UUIDs, keeping request order."""
    tokens = [token.strip() for token in raw.split(",") if token.strip()]
    if not tokens:
        raise ValidationError(message="At least one author id is required", field="ids")
    try:
        return [UUID(token) for token in tokens]
    except ValueError:
        raise ValidationError(message=f"Malformed author id list: '{raw}'", field="ids")


@router.post(
    "/authorcollections",
    name="create_author_collection",
    status_code=201,
    response_model=List[AuthorDto],
    responses={400: {"description": "Empty collection", "model": ErrorResponse}},
    summary="Create several authors in one request",
)
async def create_author_collection(
    body: List[AuthorForCreationDto],
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> List[AuthorDto]:
    if not body:
        raise ValidationError(message="The author collection cannot be empty", field="body")

    authors = await author_service.create_authors(db, body)
    ids = ",".join(str(author.id) for author in authors)
    response.headers["Location"] = str(request.base_url).rstrip("/") + f"/api/authorcollections/({ids})"
    return [AuthorDto.from_entity(author) for author in authors]


@router.get(
    "/authorcollections/({ids})",
    name="get_author_collection",
    response_model=List[AuthorDto],
    responses={
        400: {"description": "Malformed id list", "model": ErrorResponse},
        404: {"description": "One or more authors not found", "model": ErrorResponse},
    },
    summary="Get a set of authors by id",
)
async def get_author_collection(ids: str, db: AsyncSession = Depends(get_db_session)) -> List[AuthorDto]:
    author_ids = parse_ids(ids)
    authors = await author_service.get_authors_by_ids(db, author_ids)
    if len(authors) != len(author_ids):
        logger.info("Author collection lookup found %d of %d ids", len(authors), len(author_ids))
        raise NotFoundError(resource="author collection", resource_id=ids)
    return [AuthorDto.from_entity(author) for author in authors]
