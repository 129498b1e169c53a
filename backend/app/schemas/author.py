"""
Library API — Author Schemas
==============================

What:  API contracts for authors.
How:   AuthorDto is the outward shape (and the source shape of the
       AuthorDto → Author property mapping); AuthorForCreationDto is the
       inbound body for POST /api/authors and /api/authorcollections.

AuthorDto differs from the Author entity:
    name = "<first_name> <last_name>"
    age  = whole years since date_of_birth (so sorting by age reverts
           sorting by date_of_birth)
"""

import uuid
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.book import BookForCreationDto


def get_current_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Whole years elapsed since `date_of_birth`."""
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


class AuthorDto(BaseModel):
    id: uuid.UUID = Field(description="Unique author identifier")
    name: str = Field(description="First and last name")
    age: int = Field(description="Current age in years")
    genre: str = Field(description="Main genre the author writes in")

    model_config = {"from_attributes": True}

    @classmethod
    def from_entity(cls, author, today: Optional[date] = None) -> "AuthorDto":
        return cls(
            id=author.id,
            name=f"{author.first_name} {author.last_name}",
            age=get_current_age(author.date_of_birth, today),
            genre=author.genre,
        )


class AuthorForCreationDto(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    date_of_birth: date
    genre: str = Field(min_length=1, max_length=50)
    books: List[BookForCreationDto] = Field(
        default_factory=list,
        description="Books created together with the author",
    )
