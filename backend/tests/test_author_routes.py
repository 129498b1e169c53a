"""
Library API — Author Endpoint Tests
=====================================

What:  End-to-end tests for /api/authors and /api/authorcollections.
How:   HTTPX AsyncClient over ASGITransport against a temporary SQLite
       database (see conftest.py).

What we test:
    ✅ Sorting through mapped keys, including the reverted Age key
    ✅ Paging metadata header and navigation links
    ✅ Sparse fieldsets on lists and single authors
    ✅ 400 on unknown sort keys and fields
    ✅ Create, block-create, delete, and collection round trips
"""

import json
import uuid
from urllib.parse import parse_qs, urlsplit

import pytest


def _rels(links):
    return [link["rel"] for link in links]


class TestListAuthors:

    @pytest.mark.asyncio
    async def test_default_sort_is_by_name(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors")
        assert response.status_code == 200
        names = [author["name"] for author in response.json()["value"]]
        assert names == ["George RR Martin", "Neil Gaiman", "Stephen King", "Tom Lanoye"]

    @pytest.mark.asyncio
    async def test_age_desc_puts_oldest_first(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors", params={"orderBy": "age desc"})
        names = [author["name"] for author in response.json()["value"]]
        assert names == ["Stephen King", "George RR Martin", "Tom Lanoye", "Neil Gaiman"]

    @pytest.mark.asyncio
    async def test_multi_key_sort(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors", params={"orderBy": "genre desc, name"})
        names = [author["name"] for author in response.json()["value"]]
        assert names == ["Tom Lanoye", "Stephen King", "George RR Martin", "Neil Gaiman"]

    @pytest.mark.asyncio
    async def test_unknown_sort_key_is_400(self, test_client):
        response = await test_client.get("/api/authors", params={"orderBy": "nickname"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "orderBy"

    @pytest.mark.asyncio
    async def test_unknown_field_is_400(self, test_client):
        response = await test_client.get("/api/authors", params={"fields": "name,nickname"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_positive_page_number_is_400(self, test_client):
        response = await test_client.get("/api/authors", params={"pageNumber": 0})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "pageNumber"

    @pytest.mark.asyncio
    async def test_paging_header_and_links(self, test_client, seeded_authors):
        response = await test_client.get(
            "/api/authors", params={"pageNumber": 2, "pageSize": 1, "orderBy": "name"}
        )
        assert response.status_code == 200
        header = json.loads(response.headers["X-Pagination"])
        assert header["totalCount"] == 4
        assert header["pageSize"] == 1
        assert header["currentPage"] == 2
        assert header["totalPages"] == 4

        body = response.json()
        assert [author["name"] for author in body["value"]] == ["Neil Gaiman"]
        assert _rels(body["links"]) == ["self", "nextPage", "previousPage"]
        next_query = parse_qs(urlsplit(body["links"][1]["href"]).query)
        assert next_query["pageNumber"] == ["3"]
        assert next_query["orderBy"] == ["name"]

        assert header["nextPageLink"] == body["links"][1]["href"]
        assert header["previousPageLink"] == body["links"][2]["href"]
        assert parse_qs(urlsplit(header["previousPageLink"]).query)["pageNumber"] == ["1"]

    @pytest.mark.asyncio
    async def test_header_omits_links_on_a_single_page(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors")
        header = json.loads(response.headers["X-Pagination"])
        assert "nextPageLink" not in header
        assert "previousPageLink" not in header

    @pytest.mark.asyncio
    async def test_non_integer_page_number_is_400(self, test_client):
        response = await test_client.get("/api/authors", params={"pageNumber": "abc"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_single_page_has_only_self_link(self, test_client, seeded_authors):
        body = (await test_client.get("/api/authors")).json()
        assert _rels(body["links"]) == ["self"]

    @pytest.mark.asyncio
    async def test_page_size_is_clamped(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors", params={"pageSize": 500})
        assert json.loads(response.headers["X-Pagination"])["pageSize"] == 20

    @pytest.mark.asyncio
    async def test_genre_filter_is_case_insensitive(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors", params={"genre": "fantasy"})
        names = [author["name"] for author in response.json()["value"]]
        assert names == ["George RR Martin", "Neil Gaiman"]

    @pytest.mark.asyncio
    async def test_search_query_wildcards_match_literally(self, test_client, seeded_authors):
        for term in ("%", "_"):
            response = await test_client.get("/api/authors", params={"searchQuery": term})
            assert response.status_code == 200
            assert response.json()["value"] == []
            assert json.loads(response.headers["X-Pagination"])["totalCount"] == 0

    @pytest.mark.asyncio
    async def test_search_query_matches_names(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors", params={"searchQuery": "gai"})
        names = [author["name"] for author in response.json()["value"]]
        assert names == ["Neil Gaiman"]
        assert json.loads(response.headers["X-Pagination"])["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_fields_shape_every_item(self, test_client, seeded_authors):
        response = await test_client.get("/api/authors", params={"fields": "name"})
        for author in response.json()["value"]:
            assert list(author) == ["id", "name", "links"]
            assert parse_qs(urlsplit(author["links"][0]["href"]).query) == {"fields": ["name"]}


class TestSingleAuthor:

    @pytest.mark.asyncio
    async def test_get_author_with_links(self, test_client, seeded_authors):
        author_id = seeded_authors[1]["id"]
        response = await test_client.get(f"/api/authors/{author_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Stephen King"
        assert _rels(body["links"]) == ["self", "delete_author", "create_book_for_author", "books"]
        assert body["links"][0]["href"] == f"http://test/api/authors/{author_id}"

    @pytest.mark.asyncio
    async def test_get_author_shaped(self, test_client, seeded_authors):
        author_id = seeded_authors[0]["id"]
        response = await test_client.get(f"/api/authors/{author_id}", params={"fields": "genre"})
        body = response.json()
        assert body["id"] == author_id
        assert body["genre"] == "Fantasy"
        assert "name" not in body

    @pytest.mark.asyncio
    async def test_get_missing_author_is_404(self, test_client):
        response = await test_client.get(f"/api/authors/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_create_author_with_books(self, test_client, author_payload):
        response = await test_client.post("/api/authors", json=author_payload)
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Stephen King"
        assert response.headers["Location"] == body["links"][0]["href"]

        books = await test_client.get(f"/api/authors/{body['id']}/books")
        assert sorted(book["title"] for book in books.json()["value"]) == ["Misery", "The Shining"]

    @pytest.mark.asyncio
    async def test_create_author_with_invalid_body_is_422(self, test_client, author_payload):
        author_payload["first_name"] = ""
        response = await test_client.post("/api/authors", json=author_payload)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_post_to_existing_author_is_409(self, test_client, seeded_authors):
        response = await test_client.post(f"/api/authors/{seeded_authors[0]['id']}")
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_post_to_unknown_author_is_404(self, test_client):
        response = await test_client.post(f"/api/authors/{uuid.uuid4()}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_author_removes_books(self, test_client, author_payload):
        author_id = (await test_client.post("/api/authors", json=author_payload)).json()["id"]

        response = await test_client.delete(f"/api/authors/{author_id}")
        assert response.status_code == 204
        assert (await test_client.get(f"/api/authors/{author_id}")).status_code == 404
        assert (await test_client.get(f"/api/authors/{author_id}/books")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_author_is_404(self, test_client):
        response = await test_client.delete(f"/api/authors/{uuid.uuid4()}")
        assert response.status_code == 404


class TestAuthorCollections:

    @pytest.mark.asyncio
    async def test_create_and_fetch_collection(self, test_client, author_payload):
        second = {**author_payload, "first_name": "Joe", "last_name": "Hill", "books": []}
        response = await test_client.post("/api/authorcollections", json=[author_payload, second])
        assert response.status_code == 201
        created = response.json()
        ids = [author["id"] for author in created]
        assert response.headers["Location"] == f"http://test/api/authorcollections/({','.join(ids)})"

        fetched = await test_client.get(f"/api/authorcollections/({','.join(reversed(ids))})")
        assert fetched.status_code == 200
        assert [author["id"] for author in fetched.json()] == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_empty_collection_is_400(self, test_client):
        response = await test_client.post("/api/authorcollections", json=[])
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_ids_are_400(self, test_client):
        response = await test_client.get("/api/authorcollections/(not-a-uuid)")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, test_client, seeded_authors):
        ids = f"{seeded_authors[0]['id']},{uuid.uuid4()}"
        response = await test_client.get(f"/api/authorcollections/({ids})")
        assert response.status_code == 404


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert "X-Request-ID" in response.headers
