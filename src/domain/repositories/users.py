"""User repository interface."""

from __future__ import annotations

from abc import abstractmethod

from src.domain.exceptions import ConflictError
from src.domain.models.users import User

from .base import RecordStore


class UserRepository(RecordStore[User, int]):
    """Read/write interface for User entities.

    find_by_email returns None when no user has that email.
    update_user_name and update_user_email are field-level patches built on
    find_by_id_or_throw + update; they are concrete here so every
    implementation enforces the same email-uniqueness rule.
    """

    entity_name = "User"

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Return the user with exactly this email, or None."""

    @abstractmethod
    async def find_by_name_containing(self, fragment: str) -> list[User]:
        """Return users whose name contains fragment (case-insensitive)."""

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        """Return True when any user holds this email."""

    @abstractmethod
    async def find_all_order_by_name(self) -> list[User]:
        """Return all users ordered by name ascending."""

    async def update_user_name(self, id: int, new_name: str) -> User:
        user = await self.find_by_id_or_throw(id)
        return await self.update(user.with_name(new_name))

    async def update_user_email(self, id: int, new_email: str) -> User:
        """Change a user's email.

        Raises NotFoundError when the user does not exist and ConflictError
        when a different user already holds new_email.  The check and the
        write are not atomic; the uq_users_email constraint catches the race.
        """
        user = await self.find_by_id_or_throw(id)
        holder = await self.find_by_email(new_email)
        if holder is not None and holder.id != id:
            raise ConflictError(
                f"Email {new_email} is already in use by another user",
                field="email",
                value=new_email,
            )
        return await self.update(user.with_email(new_email))
