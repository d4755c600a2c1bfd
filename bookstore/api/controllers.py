"""Request handlers shared by the catalog resources.

A controller validates the request, talks to a repository, maps the result and
chooses the status code. Anything unexpected is logged and answered with a
generic 500 so that internal details never reach the client.
"""

import logging
from collections.abc import Callable
from typing import Any, ClassVar, Generic, TypeVar

from fastapi import HTTPException, Response, status
from pydantic import BaseModel, ValidationError

from bookstore.api import mapping
from bookstore.api.schemas import (
    AuthorCreateRequest,
    AuthorCreatedResponse,
    AuthorResponse,
    AuthorUpdateRequest,
    BookCreateRequest,
    BookCreatedResponse,
    BookResponse,
    BookUpdateRequest,
)
from bookstore.domain.models import Author, Book
from bookstore.ports.repository import RepositoryPort

GENERIC_ERROR = "Something went wrong. Please contact the Administrator"

EntityT = TypeVar("EntityT")
ReadT = TypeVar("ReadT", bound=BaseModel)

logger = logging.getLogger(__name__)


def internal_error(log: logging.Logger, message: str) -> HTTPException:
    """Log the real cause and build the 500 the client sees."""
    log.error(message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=GENERIC_ERROR,
    )


def describe_exception(exc: BaseException) -> str:
    inner = exc.__cause__ or exc.__context__
    return f"{exc} - {inner}" if inner else str(exc)


def _body_id(payload: dict[str, Any]) -> Any:
    return next((value for key, value in payload.items() if str(key).lower() == "id"), None)


class ResourceController(Generic[EntityT, ReadT]):
    """List/get/create/update/delete over one repository."""

    resource: ClassVar[str]
    entity_key: ClassVar[str]
    create_schema: ClassVar[type[BaseModel]]
    update_schema: ClassVar[type[BaseModel]]
    created_schema: ClassVar[type[BaseModel]]
    from_create: ClassVar[Callable[[Any], Any]]
    from_update: ClassVar[Callable[[Any], Any]]
    to_response: ClassVar[Callable[[Any], Any]]

    def __init__(
        self,
        repository: RepositoryPort[EntityT],
        log: logging.Logger | None = None,
    ) -> None:
        self._repository = repository
        self._logger = log or logger

    # ── Operations ─────────────────────────────────

    async def get_all(self) -> list[ReadT]:
        location = self._location("get_all")
        try:
            self._logger.info("%s: Attempted call", location)
            entities = await self._repository.find_all()
            response = mapping.map_many(self.to_response, entities)
            self._logger.info("%s: Successful call (%d records)", location, len(response))
            return response
        except HTTPException:
            raise
        except Exception as exc:
            raise internal_error(self._logger, f"{location}: {describe_exception(exc)}") from exc

    async def get_by_id(self, entity_id: int) -> ReadT:
        location = self._location("get_by_id")
        try:
            self._logger.info("%s: Attempted call for id: %s", location, entity_id)
            entity = await self._repository.find_by_id(entity_id)
            if entity is None:
                self._logger.warning("%s: Failed to retrieve id: %s", location, entity_id)
                raise self._not_found()
            response = self.to_response(entity)
            self._logger.info("%s: Successful call for id: %s", location, entity_id)
            return response
        except HTTPException:
            raise
        except Exception as exc:
            raise internal_error(self._logger, f"{location}: {describe_exception(exc)}") from exc

    async def create(self, payload: dict[str, Any] | None) -> BaseModel:
        location = self._location("create")
        try:
            self._logger.info("%s: Create attempted", location)
            if payload is None:
                self._logger.warning("%s: Empty request was made", location)
                raise self._bad_request("Request body is required")
            dto = self._validate(self.create_schema, payload, location)
            await self._check_references(dto, location)

            entity = self.from_create(dto)
            result = await self._repository.create(entity)
            if not result.ok:
                raise internal_error(self._logger, f"{location}: Creation failed")

            self._logger.info("%s: Creation successful, id: %s", location, entity.id)
            return self.created_schema(**{self.entity_key: self.to_response(entity)})
        except HTTPException:
            raise
        except Exception as exc:
            raise internal_error(self._logger, f"{location}: {describe_exception(exc)}") from exc

    async def update(self, entity_id: int, payload: dict[str, Any] | None) -> Response:
        location = self._location("update")
        try:
            self._logger.info("%s: Update attempted on record with id: %s", location, entity_id)
            if entity_id < 1 or payload is None or _body_id(payload) != entity_id:
                self._logger.warning("%s: Update failed with bad data - id: %s", location, entity_id)
                raise self._bad_request("Path id and body id must match")
            if not await self._repository.exists(entity_id):
                self._logger.warning("%s: Failed to retrieve record with id: %s", location, entity_id)
                raise self._not_found()
            dto = self._validate(self.update_schema, payload, location)
            await self._check_references(dto, location)

            result = await self._repository.update(self.from_update(dto))
            if not result.ok:
                raise internal_error(self._logger, f"{location}: Operation failed for id: {entity_id}")

            self._logger.info("%s: Operation successful (%s)", location, result.value)
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        except HTTPException:
            raise
        except Exception as exc:
            raise internal_error(self._logger, f"{location}: {describe_exception(exc)}") from exc

    async def delete(self, entity_id: int) -> Response:
        location = self._location("delete")
        try:
            self._logger.info("%s: Delete attempted on record with id: %s", location, entity_id)
            if entity_id < 1:
                self._logger.warning("%s: Delete failed with bad data - id: %s", location, entity_id)
                raise self._bad_request("Id must be a positive integer")
            entity = None
            if await self._repository.exists(entity_id):
                entity = await self._repository.find_by_id(entity_id)
            if entity is None:
                self._logger.warning("%s: Record with id: %s was not found", location, entity_id)
                raise self._not_found()

            result = await self._repository.delete(entity)
            if not result.ok:
                raise internal_error(self._logger, f"{location}: Delete attempt with id: {entity_id} failed")

            self._logger.info("%s: Delete attempt with id: %s succeeded", location, entity_id)
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        except HTTPException:
            raise
        except Exception as exc:
            raise internal_error(self._logger, f"{location}: {describe_exception(exc)}") from exc

    # ── Helpers ────────────────────────────────────

    async def _check_references(self, dto: BaseModel, location: str) -> None:
        """Hook for resources whose payload points at other records."""
        return None

    def _validate(self, schema: type[BaseModel], payload: dict[str, Any], location: str) -> Any:
        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            self._logger.warning("%s: Data was incomplete (%d errors)", location, exc.error_count())
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

    def _location(self, action: str) -> str:
        return f"{self.resource} - {action}"

    def _not_found(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{self.entity_key.capitalize()} not found",
        )

    @staticmethod
    def _bad_request(detail: str) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthorController(ResourceController[Author, AuthorResponse]):
    resource = "Authors"
    entity_key = "author"
    create_schema = AuthorCreateRequest
    update_schema = AuthorUpdateRequest
    created_schema = AuthorCreatedResponse
    from_create = staticmethod(mapping.author_from_create)
    from_update = staticmethod(mapping.author_from_update)
    to_response = staticmethod(mapping.author_to_response)


class BookController(ResourceController[Book, BookResponse]):
    resource = "Books"
    entity_key = "book"
    create_schema = BookCreateRequest
    update_schema = BookUpdateRequest
    created_schema = BookCreatedResponse
    from_create = staticmethod(mapping.book_from_create)
    from_update = staticmethod(mapping.book_from_update)
    to_response = staticmethod(mapping.book_to_response)

    def __init__(
        self,
        repository: RepositoryPort[Book],
        authors: RepositoryPort[Author],
        log: logging.Logger | None = None,
    ) -> None:
        super().__init__(repository, log)
        self._authors = authors

    async def _check_references(self, dto: BaseModel, location: str) -> None:
        if not await self._authors.exists(dto.author_id):
            self._logger.warning("%s: Author id %s does not exist", location, dto.author_id)
            raise self._bad_request(f"Author {dto.author_id} does not exist")
