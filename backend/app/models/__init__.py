"""
Library API — ORM Models
==========================

Importing this package registers every table with Base.metadata, which both
Alembic and the test suite rely on.
"""

from app.models.author import Author
from app.models.book import Book

__all__ = ["Author", "Book"]
