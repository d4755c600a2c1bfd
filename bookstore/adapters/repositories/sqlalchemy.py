"""SQLAlchemy repository adapters for the catalog entities."""

import logging
from typing import ClassVar, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.domain.models import Author, Base, Book
from bookstore.ports.repository import RepositoryPort, WriteResult

ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger(__name__)


class SqlAlchemyRepository(RepositoryPort[ModelT]):
    """Generic repository over one mapped class; subclasses only set ``model``."""

    model: ClassVar[type[Base]]

    def __init__(self, session: AsyncSession, log: logging.Logger | None = None) -> None:
        self._session = session
        self._logger = log or logger

    async def find_all(self) -> list[ModelT]:
        result = await self._session.execute(select(self.model))
        return list(result.scalars().all())

    async def find_by_id(self, entity_id: int) -> ModelT | None:
        return await self._session.get(self.model, entity_id)

    async def exists(self, entity_id: int) -> bool:
        result = await self._session.execute(
            select(self.model.id).where(self.model.id == entity_id)
        )
        return result.scalar_one_or_none() is not None

    async def create(self, entity: ModelT) -> WriteResult:
        self._session.add(entity)
        return await self.save()

    async def update(self, entity: ModelT) -> WriteResult:
        await self._session.merge(entity)
        return await self.save()

    async def delete(self, entity: ModelT) -> WriteResult:
        await self._session.delete(entity)
        return await self.save()

    async def save(self) -> WriteResult:
        if not self._has_pending_changes():
            self._logger.debug("%s: nothing to commit", self.model.__name__)
            return WriteResult.NO_CHANGE
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            self._logger.error(
                "%s: commit rejected by the database: %s", self.model.__name__, exc.orig
            )
            return WriteResult.FAILURE
        return WriteResult.SUCCESS

    def _has_pending_changes(self) -> bool:
        session = self._session
        if session.new or session.deleted:
            return True
        # ``dirty`` also holds objects whose attributes were set to the same value.
        return any(session.is_modified(obj) for obj in session.dirty)


class AuthorRepository(SqlAlchemyRepository[Author]):
    model = Author


class BookRepository(SqlAlchemyRepository[Book]):
    model = Book
