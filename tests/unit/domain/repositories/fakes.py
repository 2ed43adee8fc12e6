"""In-memory RecordStore / UserRepository used by domain-layer tests."""

from __future__ import annotations

from src.domain.exceptions import StoreError
from src.domain.models.users import User
from src.domain.repositories.users import UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self, users: list[User] | None = None) -> None:
        self.rows: dict[int, User] = {}
        self._next_id = 1
        self.updates: list[User] = []
        for user in users or []:
            self._store(user)

    def _store(self, user: User) -> User:
        if user.id is None:
            user = user.model_copy(update={"id": self._next_id})
        self._next_id = max(self._next_id, user.id + 1)
        self.rows[user.id] = user
        return user

    async def save(self, entity): return self._store(entity)

    async def update(self, entity):
        self.updates.append(entity)
        return self._store(entity)

    async def save_or_update(self, entity): return self._store(entity)
    async def find_by_id(self, id): return self.rows.get(id)
    async def find_all(self): return list(self.rows.values())

    async def find_page(self, page, size):
        return list(self.rows.values())[page * size:page * size + size]

    async def count(self): return len(self.rows)
    async def delete_by_id(self, id): return self.rows.pop(id, None) is not None
    async def delete(self, entity): self.rows.pop(entity.id, None)

    async def delete_all(self):
        removed = len(self.rows)
        self.rows.clear()
        return removed

    async def exists_by_id(self, id): return id in self.rows

    async def execute_query(self, query, *pairs, params=None):
        raise StoreError("ad-hoc queries are not supported in memory")

    async def find_by_email(self, email):
        return next((u for u in self.rows.values() if u.email == email), None)

    async def find_by_name_containing(self, fragment):
        return [u for u in self.rows.values() if fragment.lower() in u.name.lower()]

    async def exists_by_email(self, email):
        return await self.find_by_email(email) is not None

    async def find_all_order_by_name(self):
        return sorted(self.rows.values(), key=lambda u: u.name)
