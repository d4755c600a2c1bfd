"""Repository port: abstract CRUD interface shared by every catalog entity."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class WriteResult(Enum):
    """Outcome of a write against the store."""

    SUCCESS = "success"
    FAILURE = "failure"
    NO_CHANGE = "no_change"

    @property
    def ok(self) -> bool:
        return self is not WriteResult.FAILURE


class RepositoryPort(ABC, Generic[T]):
    """Abstraction over persistence of a single entity type."""

    @abstractmethod
    async def find_all(self) -> list[T]:
        """Return every record in storage order."""
        ...

    @abstractmethod
    async def find_by_id(self, entity_id: int) -> T | None:
        """Return the record with this id, or None."""
        ...

    @abstractmethod
    async def exists(self, entity_id: int) -> bool:
        ...

    @abstractmethod
    async def create(self, entity: T) -> WriteResult:
        ...

    @abstractmethod
    async def update(self, entity: T) -> WriteResult:
        """Overwrite the stored record that has the same identity."""
        ...

    @abstractmethod
    async def delete(self, entity: T) -> WriteResult:
        ...

    @abstractmethod
    async def save(self) -> WriteResult:
        """Commit pending changes."""
        ...
