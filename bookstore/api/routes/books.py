"""Book catalog routes."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.adapters.repositories.sqlalchemy import AuthorRepository, BookRepository
from bookstore.api.controllers import BookController
from bookstore.api.schemas import BookCreatedResponse, BookResponse, ErrorResponse
from bookstore.database import get_session

router = APIRouter(
    prefix="/api/books",
    tags=["Books"],
    responses={500: {"model": ErrorResponse}},
)


def get_book_controller(session: AsyncSession = Depends(get_session)) -> BookController:
    log = logging.getLogger("bookstore.api.books")
    return BookController(BookRepository(session, log), AuthorRepository(session, log), log)


@router.get("", response_model=list[BookResponse])
async def get_books(
    controller: BookController = Depends(get_book_controller),
) -> list[BookResponse]:
    return await controller.get_all()


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_book(
    book_id: int,
    controller: BookController = Depends(get_book_controller),
) -> BookResponse:
    return await controller.get_by_id(book_id)


@router.post(
    "",
    response_model=BookCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_book(
    payload: dict[str, Any] | None = Body(default=None),
    controller: BookController = Depends(get_book_controller),
) -> BookCreatedResponse:
    """Create a book. ``authorId`` must reference an existing author."""
    return await controller.create(payload)


@router.put(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_book(
    book_id: int,
    payload: dict[str, Any] | None = Body(default=None),
    controller: BookController = Depends(get_book_controller),
) -> Response:
    return await controller.update(book_id, payload)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_book(
    book_id: int,
    controller: BookController = Depends(get_book_controller),
) -> Response:
    return await controller.delete(book_id)
