"""User account service.

The operation set behind the user-management endpoints (register, read,
list, replace, patch, delete) expressed without any HTTP concerns.  Handlers
translate the domain errors raised here into responses.

Passwords arrive already hashed; this service never sees plaintext.
"""

from __future__ import annotations

import logging

from src.domain.exceptions import ConflictError, NotFoundError
from src.domain.models.enums import UserRole
from src.domain.models.users import User
from src.domain.repositories.users import UserRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create a new account.  Raises ConflictError if email is taken."""
        if await self._users.exists_by_email(email):
            logger.warning("Registration rejected: email %s already in use", email)
            raise ConflictError(
                f"Email {email} is already in use", field="email", value=email
            )
        user = await self._users.save(User.create(name, email, password, role))
        logger.info("Registered user %s", user.id)
        return user

    async def get(self, id: int) -> User:
        return await self._users.find_by_id_or_throw(id)

    async def get_by_email(self, email: str) -> User | None:
        return await self._users.find_by_email(email)

    async def list_all(self) -> list[User]:
        return await self._users.find_all()

    async def list_page(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> list[User]:
        return await self._users.find_page(page, size)

    async def list_by_name(self) -> list[User]:
        return await self._users.find_all_order_by_name()

    async def search(self, fragment: str) -> list[User]:
        return await self._users.find_by_name_containing(fragment)

    async def count(self) -> int:
        return await self._users.count()

    async def replace(self, id: int, user: User) -> User:
        """Overwrite every mutable field of user id with the given state.

        The id argument wins over user.id.  Raises NotFoundError when id does
        not exist and ConflictError when another user holds user.email.
        """
        if not await self._users.exists_by_id(id):
            raise NotFoundError(self._users.entity_name, id)
        holder = await self._users.find_by_email(user.email)
        if holder is not None and holder.id != id:
            logger.warning("Update of user %s rejected: email %s in use", id, user.email)
            raise ConflictError(
                f"Email {user.email} is already in use by another user",
                field="email",
                value=user.email,
            )
        return await self._users.update(user.model_copy(update={"id": id}))

    async def rename(self, id: int, name: str) -> User:
        return await self._users.update_user_name(id, name)

    async def change_email(self, id: int, email: str) -> User:
        return await self._users.update_user_email(id, email)

    async def delete(self, id: int) -> None:
        """Remove user id.  Raises NotFoundError when it does not exist."""
        if not await self._users.delete_by_id(id):
            raise NotFoundError(self._users.entity_name, id)
        logger.info("Deleted user %s", id)
