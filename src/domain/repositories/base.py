"""Generic record store interface.

RecordStore[T, ID] is the root abstraction for all data-access interfaces in
this domain layer.  Concrete implementations live in
src/infrastructure/persistence/ and are wired at the application boundary via
dependency injection.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / SQLAlchemy async).
  - T is the domain model type (never an ORM row or DTO); ID is its identifier type.
  - Absence is a value (None / False) for lookups and a NotFoundError only
    for find_by_id_or_throw.
  - Every persistence failure is raised as StoreError; nothing else leaks.
  - execute_query is the escape hatch for entity-specific queries; specialised
    interfaces build their finders on top of it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from src.domain.exceptions import NotFoundError

T = TypeVar("T")
ID = TypeVar("ID")


class RecordStore(ABC, Generic[T, ID]):
    """Abstract CRUD + query interface over one entity type."""

    #: Human-readable entity name used in NotFoundError messages.
    entity_name: str = "Entity"

    @abstractmethod
    async def save(self, entity: T) -> T:
        """Insert a new entity, flush, and return it with its generated id."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Merge the entity's state into the stored record and return the merged copy."""

    @abstractmethod
    async def save_or_update(self, entity: T) -> T:
        """Insert or update depending on whether the entity's id is already stored."""

    @abstractmethod
    async def find_by_id(self, id: ID) -> T | None:
        """Return the entity with the given id, or None if not found."""

    async def find_by_id_or_throw(self, id: ID) -> T:
        """Return the entity with the given id or raise NotFoundError."""
        entity = await self.find_by_id(id)
        if entity is None:
            raise NotFoundError(self.entity_name, id)
        return entity

    @abstractmethod
    async def find_all(self) -> list[T]:
        """Return every entity."""

    @abstractmethod
    async def find_page(self, page: int, size: int) -> list[T]:
        """Return entities [page*size, page*size + size), page 0 being the first."""

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of entities."""

    @abstractmethod
    async def delete_by_id(self, id: ID) -> bool:
        """Remove the entity with the given id.  False if it did not exist."""

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Remove the given entity, reconciling it with the session first if needed."""

    @abstractmethod
    async def delete_all(self) -> int:
        """Remove every entity and return how many were removed."""

    @abstractmethod
    async def exists_by_id(self, id: ID) -> bool:
        """Return True when an entity with the given id exists."""

    @abstractmethod
    async def execute_query(
        self,
        query: Any,
        *pairs: Any,
        params: Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Run an ad-hoc query returning entities of this type.

        Parameters may be given as a mapping, as alternating name/value pairs,
        or both.  An odd number of pair items raises StoreError.
        """
