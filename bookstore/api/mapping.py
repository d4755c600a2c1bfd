"""Field-by-field mapping between ORM entities and request/response schemas."""

from collections.abc import Callable, Iterable
from typing import TypeVar

from bookstore.api.schemas import (
    AuthorCreateRequest,
    AuthorResponse,
    AuthorUpdateRequest,
    BookCreateRequest,
    BookResponse,
    BookUpdateRequest,
)
from bookstore.domain.models import Author, Book

S = TypeVar("S")
D = TypeVar("D")


def map_many(func: Callable[[S], D], items: Iterable[S]) -> list[D]:
    return [func(item) for item in items]


# ── Authors ────────────────────────────────────────


def author_from_create(dto: AuthorCreateRequest) -> Author:
    return Author(first_name=dto.first_name, last_name=dto.last_name, bio=dto.bio)


def author_from_update(dto: AuthorUpdateRequest) -> Author:
    return Author(id=dto.id, first_name=dto.first_name, last_name=dto.last_name, bio=dto.bio)


def author_to_response(author: Author) -> AuthorResponse:
    return AuthorResponse(
        id=author.id,
        first_name=author.first_name,
        last_name=author.last_name,
        bio=author.bio,
    )


# ── Books ──────────────────────────────────────────


def book_from_create(dto: BookCreateRequest) -> Book:
    return Book(
        title=dto.title,
        year=dto.year,
        isbn=dto.isbn,
        summary=dto.summary,
        image=dto.image,
        price=dto.price,
        author_id=dto.author_id,
    )


def book_from_update(dto: BookUpdateRequest) -> Book:
    book = book_from_create(dto)
    book.id = dto.id
    return book


def book_to_response(book: Book) -> BookResponse:
    return BookResponse(
        id=book.id,
        title=book.title,
        year=book.year,
        isbn=book.isbn,
        summary=book.summary,
        image=book.image,
        price=book.price,
        author_id=book.author_id,
    )
