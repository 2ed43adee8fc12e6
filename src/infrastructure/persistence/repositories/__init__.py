"""Concrete SQLAlchemy repository implementations.

Exports all SqlRepository classes and the get_repositories() factory function
for wiring at the application boundary (FastAPI dependency injection).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .base import SqlRecordStore
from .users import SqlUserRepository


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    users: SqlUserRepository


def get_repositories(session: AsyncSession) -> Repositories:
    """Construct all repositories bound to the given session.

    Intended for use as a FastAPI dependency:

        async def handler(
            session: AsyncSession = Depends(get_session),
        ) -> ...:
            repos = get_repositories(session)
            user = await UserService(repos.users).get(user_id)
    """
    return Repositories(
        users=SqlUserRepository(session),
    )


__all__ = [
    "SqlRecordStore",
    "SqlUserRepository",
    "Repositories",
    "get_repositories",
]
