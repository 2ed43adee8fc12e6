"""Generic SQLAlchemy implementation of RecordStore.

A concrete store declares, at class level, the ORM row class it manages
(``orm_model``) and the identifier attribute shared by that row and its
domain model (``id_attribute``), then supplies the two mapping functions
``_to_domain`` / ``_to_row``.  Everything else — CRUD, pagination, ad-hoc
queries, session pass-throughs — is implemented here once.

Transactions:
  Each operation runs in a unit of work on the bound AsyncSession.  If the
  session already has a transaction open (the request-scoped get_session
  dependency), the operation joins it and the owner commits or rolls back.
  Otherwise the operation begins its own transaction and commits on exit,
  rolling back on failure.

Errors:
  SQLAlchemy and driver exceptions are rewrapped into StoreError with a
  StoreErrorKind; domain errors raised inside a unit of work pass through.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import AsyncIterator, Iterator, Mapping
from contextlib import asynccontextmanager, contextmanager
from typing import Any, ClassVar, TypeVar

from sqlalchemy import Select, delete, func, select, text
from sqlalchemy.exc import (
    ArgumentError,
    CompileError,
    DBAPIError,
    IntegrityError,
    ProgrammingError,
    SQLAlchemyError,
    StatementError,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.util import identity_key
from sqlalchemy.sql.elements import TextClause

from src.domain.exceptions import DomainError, NotFoundError, StoreError, StoreErrorKind
from src.domain.repositories.base import RecordStore

logger = logging.getLogger(__name__)

DomainT = TypeVar("DomainT")
IdT = TypeVar("IdT")


def classify_error(exc: BaseException) -> StoreErrorKind:
    """Map a SQLAlchemy / driver exception onto a StoreErrorKind."""
    if isinstance(exc, IntegrityError):
        return StoreErrorKind.CONSTRAINT_VIOLATION
    if isinstance(exc, (ArgumentError, CompileError, ProgrammingError)):
        return StoreErrorKind.MALFORMED_QUERY
    # Statement errors raised before reaching the driver (e.g. a missing bind value).
    if isinstance(exc, StatementError) and not isinstance(exc, DBAPIError):
        return StoreErrorKind.MALFORMED_QUERY
    return StoreErrorKind.DATABASE


def bind_pairs(pairs: tuple[Any, ...]) -> dict[str, Any]:
    """Turn an alternating (name, value, name, value, ...) tuple into a dict.

    Raises StoreError (MALFORMED_QUERY) for an odd number of items or a
    non-string parameter name.
    """
    if len(pairs) % 2 != 0:
        raise StoreError(
            f"Query parameters must be name/value pairs; got {len(pairs)} items",
            StoreErrorKind.MALFORMED_QUERY,
        )
    params: dict[str, Any] = {}
    for name, value in zip(pairs[0::2], pairs[1::2]):
        if not isinstance(name, str):
            raise StoreError(
                f"Query parameter name must be a string; got {name!r}",
                StoreErrorKind.MALFORMED_QUERY,
            )
        params[name] = value
    return params


class SqlRecordStore(RecordStore[DomainT, IdT]):
    orm_model: ClassVar[type[Any]]
    id_attribute: ClassVar[str] = "id"

    def __init__(self, session: AsyncSession) -> None:
        if getattr(type(self), "orm_model", None) is None:
            raise TypeError(f"{type(self).__name__} must declare an orm_model")
        self._session = session

    # ------------------------------------------------------------------ #
    # Mapping hooks                                                        #
    # ------------------------------------------------------------------ #

    @staticmethod
    @abstractmethod
    def _to_domain(row: Any) -> DomainT:
        """Map an orm_model row onto the domain entity."""

    @staticmethod
    @abstractmethod
    def _to_row(entity: DomainT) -> Any:
        """Build a transient orm_model row carrying the entity's state."""

    def _id_of(self, entity: DomainT) -> IdT | None:
        return getattr(entity, self.id_attribute)

    @property
    def _id_column(self) -> Any:
        return getattr(self.orm_model, self.id_attribute)

    # ------------------------------------------------------------------ #
    # Units of work                                                        #
    # ------------------------------------------------------------------ #

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except DomainError:
            raise
        except (SQLAlchemyError, OSError) as exc:
            kind = classify_error(exc)
            logger.warning("Failed to %s %s (%s): %s", action, self.entity_name, kind.value, exc)
            raise StoreError(f"Failed to {action} {self.entity_name}", kind, exc) from exc

    @asynccontextmanager
    async def _unit_of_work(self, action: str) -> AsyncIterator[AsyncSession]:
        with self._translate_errors(action):
            if self._session.in_transaction():
                yield self._session
            else:
                async with self._session.begin():
                    yield self._session

    def _selects_whole_rows(self, query: Any) -> bool:
        if not isinstance(query, Select):
            return False
        columns = query.column_descriptions
        return len(columns) == 1 and columns[0]["type"] is self.orm_model

    def _tracked_row(self, id: IdT | None) -> Any | None:
        if id is None:
            return None
        key = identity_key(self.orm_model, id)
        return self._session.sync_session.identity_map.get(key)

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def save(self, entity: DomainT) -> DomainT:
        async with self._unit_of_work("save") as session:
            row = self._to_row(entity)
            session.add(row)
            await session.flush()
            logger.debug("Saved %s %s", self.entity_name, self._id_of(row))
            return self._to_domain(row)

    async def update(self, entity: DomainT) -> DomainT:
        async with self._unit_of_work("update") as session:
            row = await session.merge(self._to_row(entity))
            await session.flush()
            return self._to_domain(row)

    async def save_or_update(self, entity: DomainT) -> DomainT:
        async with self._unit_of_work("save or update") as session:
            row = await session.merge(self._to_row(entity))
            await session.flush()
            return self._to_domain(row)

    async def delete_by_id(self, id: IdT) -> bool:
        async with self._unit_of_work("delete") as session:
            row = await session.get(self.orm_model, id)
            if row is None:
                return False
            await session.delete(row)
            await session.flush()
            logger.debug("Deleted %s %s", self.entity_name, id)
            return True

    async def delete(self, entity: DomainT) -> None:
        id = self._id_of(entity)
        if id is None:
            raise StoreError(
                f"Cannot delete a {self.entity_name} that has no id",
                StoreErrorKind.MALFORMED_QUERY,
            )
        async with self._unit_of_work("delete") as session:
            row = self._tracked_row(id)
            if row is None:
                row = await session.merge(self._to_row(entity))
            if row in session.new:
                # Merged but never stored: nothing to remove from the database.
                session.expunge(row)
            else:
                await session.delete(row)
            await session.flush()

    async def delete_all(self) -> int:
        async with self._unit_of_work("delete all") as session:
            result = await session.execute(delete(self.orm_model))
            logger.info("Deleted %d %s records", result.rowcount, self.entity_name)
            return result.rowcount

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def find_by_id(self, id: IdT) -> DomainT | None:
        async with self._unit_of_work("find") as session:
            row = await session.get(self.orm_model, id)
            return self._to_domain(row) if row is not None else None

    async def find_all(self) -> list[DomainT]:
        stmt = select(self.orm_model).order_by(self._id_column)
        async with self._unit_of_work("find all") as session:
            result = await session.execute(stmt)
            return [self._to_domain(row) for row in result.scalars()]

    async def find_page(self, page: int, size: int) -> list[DomainT]:
        """Return one page ordered by id.

        size == 0 yields an empty list; a negative page or size is rejected
        with StoreError (MALFORMED_QUERY).
        """
        if page < 0 or size < 0:
            raise StoreError(
                f"Invalid page request (page={page}, size={size})",
                StoreErrorKind.MALFORMED_QUERY,
            )
        if size == 0:
            return []
        stmt = (
            select(self.orm_model)
            .order_by(self._id_column)
            .offset(page * size)
            .limit(size)
        )
        async with self._unit_of_work("find page of") as session:
            result = await session.execute(stmt)
            return [self._to_domain(row) for row in result.scalars()]

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.orm_model)
        async with self._unit_of_work("count") as session:
            return int(await session.scalar(stmt) or 0)

    async def exists_by_id(self, id: IdT) -> bool:
        async with self._unit_of_work("check existence of") as session:
            return await session.get(self.orm_model, id) is not None

    async def execute_query(
        self,
        query: Any,
        *pairs: Any,
        params: Mapping[str, Any] | None = None,
    ) -> list[DomainT]:
        """Run a Select over orm_model, or raw SQL mapped onto orm_model.

        query may be a Select returning whole orm_model rows, a text() clause,
        or a SQL string.  Text queries must return the table's columns.  A
        Select of anything other than orm_model rows raises StoreError
        (MALFORMED_QUERY) before any SQL runs.
        """
        bound = dict(params or {})
        bound.update(bind_pairs(pairs))
        if isinstance(query, str):
            query = text(query)
        if isinstance(query, TextClause):
            query = select(self.orm_model).from_statement(query)
        elif not self._selects_whole_rows(query):
            raise StoreError(
                f"Ad-hoc query must select whole {self.entity_name} rows",
                StoreErrorKind.MALFORMED_QUERY,
            )
        async with self._unit_of_work("query") as session:
            result = await session.execute(query, bound)
            return [self._to_domain(row) for row in result.scalars()]

    # ------------------------------------------------------------------ #
    # Session pass-throughs                                                #
    # ------------------------------------------------------------------ #

    async def flush(self) -> None:
        with self._translate_errors("flush"):
            await self._session.flush()

    def clear(self) -> None:
        self._session.expunge_all()

    def contains(self, entity: DomainT) -> bool:
        return self._tracked_row(self._id_of(entity)) is not None

    async def refresh(self, entity: DomainT) -> DomainT:
        """Reload entity from the database, overwriting any tracked state."""
        id = self._id_of(entity)
        async with self._unit_of_work("refresh") as session:
            row = (
                await session.get(self.orm_model, id, populate_existing=True)
                if id is not None
                else None
            )
            if row is None:
                raise NotFoundError(self.entity_name, id)
            return self._to_domain(row)

    def detach(self, entity: DomainT) -> None:
        row = self._tracked_row(self._id_of(entity))
        if row is not None:
            self._session.expunge(row)
