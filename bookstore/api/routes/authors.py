"""Author catalog routes. Reads are anonymous; writes need the Administrator role."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.adapters.repositories.sqlalchemy import AuthorRepository
from bookstore.api.controllers import AuthorController
from bookstore.api.middleware.auth import require_roles
from bookstore.api.schemas import AuthorCreatedResponse, AuthorResponse, ErrorResponse
from bookstore.database import get_session
from bookstore.domain.models import ADMINISTRATOR

router = APIRouter(
    prefix="/api/authors",
    tags=["Authors"],
    responses={500: {"model": ErrorResponse}},
)


def get_author_controller(session: AsyncSession = Depends(get_session)) -> AuthorController:
    log = logging.getLogger("bookstore.api.authors")
    return AuthorController(AuthorRepository(session, log), log)


@router.get("", response_model=list[AuthorResponse])
async def get_authors(
    controller: AuthorController = Depends(get_author_controller),
) -> list[AuthorResponse]:
    """List all authors."""
    return await controller.get_all()


@router.get(
    "/{author_id}",
    response_model=AuthorResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_author(
    author_id: int,
    controller: AuthorController = Depends(get_author_controller),
) -> AuthorResponse:
    """Get a single author by id."""
    return await controller.get_by_id(author_id)


@router.post(
    "",
    response_model=AuthorCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    dependencies=[Depends(require_roles(ADMINISTRATOR))],
)
async def create_author(
    payload: dict[str, Any] | None = Body(default=None),
    controller: AuthorController = Depends(get_author_controller),
) -> AuthorCreatedResponse:
    """Create an author. Body: ``{firstName, lastName, bio}``."""
    return await controller.create(payload)


@router.put(
    "/{author_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_roles(ADMINISTRATOR))],
)
async def update_author(
    author_id: int,
    payload: dict[str, Any] | None = Body(default=None),
    controller: AuthorController = Depends(get_author_controller),
) -> Response:
    """Replace an author. The body ``id`` must equal the path id."""
    return await controller.update(author_id, payload)


@router.delete(
    "/{author_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_roles(ADMINISTRATOR))],
)
async def delete_author(
    author_id: int,
    controller: AuthorController = Depends(get_author_controller),
) -> Response:
    """Delete an author and, through the database cascade, their books."""
    return await controller.delete(author_id)
