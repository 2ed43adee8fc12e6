"""User domain model.

A pure domain object — no ORM or persistence concerns.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .enums import UserRole


class User(BaseModel):
    """A registered user account.

    id is assigned by the database on insert and is None until then.
    email is unique across all users.
    password is always an already-hashed value; hashing happens before a
    User is constructed and never inside this package.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str
    email: str
    password: str
    role: UserRole = UserRole.USER

    @classmethod
    def create(
        cls,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Named constructor for a not-yet-persisted user."""
        return cls(name=name, email=email, password=password, role=role)

    def with_name(self, name: str) -> User:
        return self.model_copy(update={"name": name})

    def with_email(self, email: str) -> User:
        return self.model_copy(update={"email": email})
