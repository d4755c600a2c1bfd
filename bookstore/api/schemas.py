"""Pydantic request/response schemas (wire format is camelCase)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _fold(key: str) -> str:
    return key.replace("_", "").lower()


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        """Accept ``FirstName``, ``firstName``, ``firstname`` and ``first_name`` alike."""
        if not isinstance(data, dict):
            return data
        aliases = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or to_camel(name)
            aliases[_fold(name)] = alias
            aliases[_fold(alias)] = alias
        return {
            aliases.get(_fold(key), key) if isinstance(key, str) else key: value
            for key, value in data.items()
        }


# ── Authors ────────────────────────────────────────


class AuthorCreateRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    bio: str | None = Field(default=None, max_length=250)


class AuthorUpdateRequest(AuthorCreateRequest):
    id: int = Field(..., ge=1)


class AuthorResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    bio: str | None = None


class AuthorCreatedResponse(BaseModel):
    author: AuthorResponse


# ── Books ──────────────────────────────────────────


class BookCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    year: int | None = Field(default=None, ge=1000, le=9999)
    isbn: str = Field(..., min_length=1, max_length=20)
    summary: str | None = Field(default=None, max_length=500)
    image: str | None = Field(default=None, max_length=500)
    price: float | None = Field(default=None, ge=0)
    author_id: int = Field(..., ge=1)


class BookUpdateRequest(BookCreateRequest):
    id: int = Field(..., ge=1)


class BookResponse(CamelModel):
    id: int
    title: str
    year: int | None = None
    isbn: str
    summary: str | None = None
    image: str | None = None
    price: float | None = None
    author_id: int


class BookCreatedResponse(BaseModel):
    book: BookResponse


# ── Users ──────────────────────────────────────────


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    token: str


class ErrorResponse(BaseModel):
    detail: str | list[dict]
