"""
Library API — Shared Pydantic Schemas
=======================================

What:  Wire models shared by every resource: hypermedia links, paging
       metadata, the linked collection envelope, errors, and health.
Who:   Link builder, paged list, route handlers, exception handlers.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """
    A hypermedia link advertising a related action or navigation target.

    Example:
        {"href": "http://host/api/authors/5f1…", "rel": "self", "method": "GET"}
    """

    model_config = ConfigDict(frozen=True)

    href: str = Field(description="Absolute URL of the target")
    rel: str = Field(description="Relation of the target to the current resource")
    method: str = Field(description="HTTP method to use with the target")


class PaginationMetadata(BaseModel):
    """
    Paging metadata serialized into the X-Pagination header.

    Serialized by alias so the header keeps the camelCase keys clients use:
        {"totalCount": 10, "pageSize": 3, "currentPage": 2, "totalPages": 4}
    """

    model_config = ConfigDict(populate_by_name=True)

    total_count: int = Field(alias="totalCount", ge=0)
    page_size: int = Field(alias="pageSize", gt=0)
    current_page: int = Field(alias="currentPage", gt=0)
    total_pages: int = Field(alias="totalPages", ge=0)
    previous_page_link: Optional[str] = Field(default=None, alias="previousPageLink")
    next_page_link: Optional[str] = Field(default=None, alias="nextPageLink")

    def to_header(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class LinkedCollectionResponse(BaseModel):
    """
    Collection envelope: shaped items (each with its own links) plus the
    collection's navigation links.
    """

    value: List[Dict[str, Any]] = Field(description="Shaped items, each carrying a `links` list")
    links: List[Link] = Field(description="Collection navigation and action links")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Field 'nickname' was not found on AuthorDto",
            "details": {"field": "nickname", "shape": "AuthorDto"},
            "request_id": "1a2b3c4d"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
