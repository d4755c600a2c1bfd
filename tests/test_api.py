"""Integration tests for the bookstore API."""

import logging

import pytest
from httpx import AsyncClient

from bookstore.api.controllers import GENERIC_ERROR
from bookstore.api.middleware.auth import decode_access_token
from bookstore.config import settings

ADMIN_PASSWORD = "P@ssword1"


async def _create_author(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {"firstName": "Ursula", "lastName": "Le Guin", "bio": "Earthsea"}
    payload.update(overrides)
    resp = await client.post("/api/authors", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["author"]


async def _create_book(client: AsyncClient, author_id: int, **overrides) -> dict:
    payload = {
        "title": "A Wizard of Earthsea",
        "year": 1968,
        "isbn": "978-0553383041",
        "summary": "Ged's apprenticeship",
        "price": 9.99,
        "authorId": author_id,
    }
    payload.update(overrides)
    resp = await client.post("/api/books", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["book"]


# ── Users / Login ──────────────────────────────────


@pytest.mark.asyncio
async def test_login_success_returns_token_with_claims(client: AsyncClient):
    resp = await client.post("/api/users", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    claims = decode_access_token(resp.json()["token"])
    assert claims["sub"] == "admin@bookstore.com"
    assert claims["role"] == ["Administrator"]
    assert claims["jti"]
    assert claims["nameid"].isdigit()


@pytest.mark.asyncio
async def test_login_wrong_password_echoes_username(client: AsyncClient):
    resp = await client.post("/api/users", json={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"username": "admin"}


@pytest.mark.asyncio
async def test_login_unknown_user(client: AsyncClient):
    resp = await client.post("/api/users", json={"username": "nobody", "password": "whatever"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_password_is_bad_request(client: AsyncClient):
    resp = await client.post("/api/users", json={"username": "admin"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_login_with_unconfigured_signing_key_is_logged_500(client: AsyncClient, monkeypatch, caplog):
    monkeypatch.setattr(settings, "jwt_key", "")
    caplog.set_level(logging.ERROR)

    resp = await client.post("/api/users", json={"username": "admin", "password": ADMIN_PASSWORD})

    assert resp.status_code == 500
    assert resp.json() == {"detail": GENERIC_ERROR}
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert any("JWT signing key is not configured" in message for message in errors)


# ── Authors ────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_and_get_author(client: AsyncClient, admin_headers: dict):
    resp = await client.post(
        "/api/authors",
        json={"firstName": "A", "lastName": "B", "bio": "x"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    author = resp.json()["author"]
    assert isinstance(author["id"], int)

    resp = await client.get(f"/api/authors/{author['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"id": author["id"], "firstName": "A", "lastName": "B", "bio": "x"}


@pytest.mark.asyncio
async def test_list_authors_is_anonymous(client: AsyncClient, admin_headers: dict):
    await _create_author(client, admin_headers)
    await _create_author(client, admin_headers, firstName="Iain", lastName="Banks")

    resp = await client.get("/api/authors")
    assert resp.status_code == 200
    assert [a["lastName"] for a in resp.json()] == ["Le Guin", "Banks"]


@pytest.mark.asyncio
async def test_get_missing_author_returns_404(client: AsyncClient):
    resp = await client.get("/api/authors/999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_get_author_with_non_integer_id_is_bad_request(client: AsyncClient):
    resp = await client.get("/api/authors/abc")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_author_writes_require_token(client: AsyncClient):
    resp = await client.post("/api/authors", json={"firstName": "A", "lastName": "B"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_author_writes_require_administrator(client: AsyncClient, customer_headers: dict):
    resp = await client.post(
        "/api/authors",
        json={"firstName": "A", "lastName": "B"},
        headers=customer_headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_author_write_rejects_garbage_token(client: AsyncClient):
    resp = await client.delete("/api/authors/1", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_author_without_body(client: AsyncClient, admin_headers: dict):
    resp = await client.post("/api/authors", headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_author_with_invalid_fields(client: AsyncClient, admin_headers: dict):
    resp = await client.post(
        "/api/authors",
        json={"firstName": "", "lastName": "B", "bio": "x" * 251},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    failed = {tuple(err["loc"]) for err in resp.json()["detail"]}
    assert ("firstName",) in failed
    assert ("bio",) in failed


@pytest.mark.asyncio
async def test_update_author(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)

    resp = await client.put(
        f"/api/authors/{author['id']}",
        json={"id": author["id"], "firstName": "Ursula K.", "lastName": "Le Guin"},
        headers=admin_headers,
    )
    assert resp.status_code == 204

    resp = await client.get(f"/api/authors/{author['id']}")
    assert resp.json() == {
        "id": author["id"],
        "firstName": "Ursula K.",
        "lastName": "Le Guin",
        "bio": None,
    }


@pytest.mark.asyncio
async def test_update_author_with_mismatched_ids(client: AsyncClient, admin_headers: dict):
    resp = await client.put(
        "/api/authors/5",
        json={"id": 6, "firstName": "A", "lastName": "B"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_author_mismatch_does_not_mutate(client: AsyncClient, admin_headers: dict):
    first = await _create_author(client, admin_headers)
    second = await _create_author(client, admin_headers, firstName="Iain", lastName="Banks")

    resp = await client.put(
        f"/api/authors/{first['id']}",
        json={"id": second["id"], "firstName": "Changed", "lastName": "Changed"},
        headers=admin_headers,
    )
    assert resp.status_code == 400

    assert (await client.get(f"/api/authors/{first['id']}")).json() == first
    assert (await client.get(f"/api/authors/{second['id']}")).json() == second


@pytest.mark.asyncio
async def test_update_missing_author_returns_404(client: AsyncClient, admin_headers: dict):
    resp = await client.put(
        "/api/authors/99",
        json={"id": 99, "firstName": "A", "lastName": "B"},
        headers=admin_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_author_with_invalid_body(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    resp = await client.put(
        f"/api/authors/{author['id']}",
        json={"id": author["id"], "firstName": "A"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_author(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)

    resp = await client.delete(f"/api/authors/{author['id']}", headers=admin_headers)
    assert resp.status_code == 204

    resp = await client.get(f"/api/authors/{author['id']}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_author_bad_and_missing_ids(client: AsyncClient, admin_headers: dict):
    assert (await client.delete("/api/authors/0", headers=admin_headers)).status_code == 400
    assert (await client.delete("/api/authors/404", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_author_body_keys_are_case_insensitive(client: AsyncClient, admin_headers: dict):
    resp = await client.post(
        "/api/authors",
        json={"FirstName": "A", "LastName": "B", "Bio": "x"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    author = resp.json()["author"]
    assert author == {"id": author["id"], "firstName": "A", "lastName": "B", "bio": "x"}

    resp = await client.put(
        f"/api/authors/{author['id']}",
        json={"Id": author["id"], "FirstName": "C", "LastName": "D"},
        headers=admin_headers,
    )
    assert resp.status_code == 204, resp.text

    resp = await client.get(f"/api/authors/{author['id']}")
    assert resp.json() == {"id": author["id"], "firstName": "C", "lastName": "D", "bio": None}


@pytest.mark.asyncio
async def test_delete_author_removes_their_books(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    book = await _create_book(client, author["id"])

    resp = await client.delete(f"/api/authors/{author['id']}", headers=admin_headers)
    assert resp.status_code == 204

    assert (await client.get(f"/api/books/{book['id']}")).status_code == 404
    assert (await client.get("/api/books")).json() == []


# ── Books ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_and_list_books(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    book = await _create_book(client, author["id"])
    assert book["title"] == "A Wizard of Earthsea"
    assert book["authorId"] == author["id"]

    resp = await client.get("/api/books")
    assert resp.status_code == 200
    assert [b["id"] for b in resp.json()] == [book["id"]]

    resp = await client.get(f"/api/books/{book['id']}")
    assert resp.status_code == 200
    assert resp.json() == book


@pytest.mark.asyncio
async def test_create_book_for_unknown_author(client: AsyncClient):
    resp = await client.post(
        "/api/books",
        json={"title": "Orphan", "isbn": "0000000000", "authorId": 42},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_book_missing_required_fields(client: AsyncClient):
    resp = await client.post("/api/books", json={"title": "No ISBN"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_isbn_is_a_generic_server_error(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    await _create_book(client, author["id"], isbn="DUP-1")

    resp = await client.post(
        "/api/books",
        json={"title": "Copy", "isbn": "DUP-1", "authorId": author["id"]},
    )
    assert resp.status_code == 500
    assert resp.json() == {"detail": GENERIC_ERROR}


@pytest.mark.asyncio
async def test_update_book(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    other = await _create_author(client, admin_headers, firstName="Iain", lastName="Banks")
    book = await _create_book(client, author["id"])

    resp = await client.put(
        f"/api/books/{book['id']}",
        json={"id": book["id"], "title": "The Tombs of Atuan", "isbn": book["isbn"], "authorId": other["id"]},
    )
    assert resp.status_code == 204

    updated = (await client.get(f"/api/books/{book['id']}")).json()
    assert updated["title"] == "The Tombs of Atuan"
    assert updated["authorId"] == other["id"]
    assert updated["year"] is None


@pytest.mark.asyncio
async def test_update_book_to_unknown_author(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    book = await _create_book(client, author["id"])

    resp = await client.put(
        f"/api/books/{book['id']}",
        json={"id": book["id"], "title": "T", "isbn": book["isbn"], "authorId": 777},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_book_checks(client: AsyncClient):
    resp = await client.put("/api/books/0", json={"id": 0, "title": "T", "isbn": "1", "authorId": 1})
    assert resp.status_code == 400
    resp = await client.put("/api/books/3", json={"id": 3, "title": "T", "isbn": "1", "authorId": 1})
    assert resp.status_code == 404
    resp = await client.put("/api/books/3")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_book(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)
    book = await _create_book(client, author["id"])

    resp = await client.delete(f"/api/books/{book['id']}")
    assert resp.status_code == 204

    assert (await client.get(f"/api/books/{book['id']}")).status_code == 404
    assert (await client.delete(f"/api/books/{book['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_book_body_keys_are_case_insensitive(client: AsyncClient, admin_headers: dict):
    author = await _create_author(client, admin_headers)

    resp = await client.post(
        "/api/books",
        json={"Title": "Dune", "Year": 1965, "ISBN": "978-0441013593", "AuthorId": author["id"]},
    )
    assert resp.status_code == 201, resp.text
    book = resp.json()["book"]
    assert book["isbn"] == "978-0441013593"
    assert book["authorId"] == author["id"]


# ── Health Check ───────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
