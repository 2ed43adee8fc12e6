"""Domain error taxonomy.

Every failure that leaves a repository or service is one of these.  SQLAlchemy
and driver exceptions never cross the repository boundary; they are rewrapped
into StoreError with the original exception chained as ``__cause__``.

Mapping to a protocol is the presentation layer's job:
  NotFoundError  → 404
  ConflictError  → 409 (or 400)
  StoreError     → 500
"""

from __future__ import annotations

from enum import Enum


class StoreErrorKind(str, Enum):
    """Coarse classification of a persistence failure."""

    CONSTRAINT_VIOLATION = "constraint_violation"
    MALFORMED_QUERY = "malformed_query"
    DATABASE = "database"


class DomainError(Exception):
    """Root of all errors raised by this package."""


class NotFoundError(DomainError):
    """The requested identifier has no matching record."""

    def __init__(self, entity_name: str, entity_id: object) -> None:
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"{entity_name} with id {entity_id} not found")


class ConflictError(DomainError):
    """A write would violate a uniqueness invariant."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object | None = None,
    ) -> None:
        self.message = message
        self.field = field
        self.value = value
        super().__init__(message)


class StoreError(DomainError):
    """Any failure of the underlying persistence layer.

    kind lets callers tell constraint violations and malformed queries apart
    from everything else; code that only catches StoreError is unaffected.
    cause holds the original exception (also chained via ``raise ... from``).
    """

    def __init__(
        self,
        message: str,
        kind: StoreErrorKind = StoreErrorKind.DATABASE,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.kind = kind
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"
