"""
Library API — Book Schemas
============================

What:  API contracts for books owned by an author.
How:   Creation and update bodies share BookForManipulationDto, which
       enforces the title/description rules. Violations surface as 422
       through FastAPI's request validation.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class BookDto(BaseModel):
    id: uuid.UUID = Field(description="Unique book identifier")
    title: str
    description: Optional[str] = None
    author_id: uuid.UUID = Field(description="Identifier of the owning author")

    model_config = {"from_attributes": True}


class BookForManipulationDto(BaseModel):
    """Shared rules for inbound book bodies."""

    title: str = Field(min_length=1, max_length=100, description="You should fill out a title.")
    description: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def description_differs_from_title(self) -> "BookForManipulationDto":
        if self.description is not None and self.description == self.title:
            raise ValueError("The provided description should be different from the title.")
        return self


class BookForCreationDto(BookForManipulationDto):
    pass


class BookForUpdateDto(BookForManipulationDto):
    """PUT body; a full update must carry a description."""

    @model_validator(mode="after")
    def description_required(self) -> "BookForUpdateDto":
        if not self.description:
            raise ValueError("You should fill out a description.")
        return self
