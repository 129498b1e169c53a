"""
Library API — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Settings are overridden through environment variables BEFORE any
       `app` import, so the module-level engine points at a throwaway
       SQLite file instead of PostgreSQL.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_client: HTTPX AsyncClient over a freshly created schema
    ├── author_payload: Body for POST /api/authors
    └── seeded_authors: Four authors created through the API
"""

import os
import tempfile
from typing import Any, Dict, List

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

_db_dir = tempfile.mkdtemp(prefix="library_api_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEFAULT_PAGE_SIZE"] = "10"
os.environ["MAX_PAGE_SIZE"] = "20"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client():
    """
    Async HTTP client bound to the app, with an empty schema per test.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.database import create_schema, drop_schema, engine
    from app.main import app

    await create_schema()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await drop_schema()
    await engine.dispose()


@pytest.fixture
def author_payload() -> Dict[str, Any]:
    return {
        "first_name": "Stephen",
        "last_name": "King",
        "date_of_birth": "1947-09-21",
        "genre": "Horror",
        "books": [
            {"title": "The Shining", "description": "A family heads to an isolated hotel."},
            {"title": "Misery", "description": "A writer and his number one fan."},
        ],
    }


AUTHORS: List[Dict[str, Any]] = [
    {"first_name": "George", "last_name": "RR Martin", "date_of_birth": "1948-09-20", "genre": "Fantasy"},
    {"first_name": "Stephen", "last_name": "King", "date_of_birth": "1947-09-21", "genre": "Horror"},
    {"first_name": "Neil", "last_name": "Gaiman", "date_of_birth": "1960-11-10", "genre": "Fantasy"},
    {"first_name": "Tom", "last_name": "Lanoye", "date_of_birth": "1958-08-27", "genre": "Various"},
]


@pytest_asyncio.fixture
async def seeded_authors(test_client) -> List[Dict[str, Any]]:
    """Creates AUTHORS through the API; returns the created bodies."""
    created = []
    for body in AUTHORS:
        response = await test_client.post("/api/authors", json=body)
        assert response.status_code == 201
        created.append(response.json())
    return created
