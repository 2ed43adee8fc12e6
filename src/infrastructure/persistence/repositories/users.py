"""SQLAlchemy implementation of UserRepository."""

from __future__ import annotations

from sqlalchemy import bindparam, func, select

from src.domain.models.enums import UserRole
from src.domain.models.users import User as DomainUser
from src.domain.repositories.users import UserRepository
from src.infrastructure.persistence.models.users import User as OrmUser

from .base import SqlRecordStore


class SqlUserRepository(UserRepository, SqlRecordStore[DomainUser, int]):
    orm_model = OrmUser

    @staticmethod
    def _to_domain(row: OrmUser) -> DomainUser:
        return DomainUser(
            id=row.id,
            name=row.name,
            email=row.email,
            password=row.password,
            role=UserRole(row.role),
        )

    @staticmethod
    def _to_row(entity: DomainUser) -> OrmUser:
        return OrmUser(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            password=entity.password,
            role=entity.role.value,
        )

    async def find_by_email(self, email: str) -> DomainUser | None:
        stmt = select(OrmUser).where(OrmUser.email == bindparam("email"))
        users = await self.execute_query(stmt, "email", email)
        return users[0] if users else None

    async def find_by_name_containing(self, fragment: str) -> list[DomainUser]:
        stmt = (
            select(OrmUser)
            .where(func.lower(OrmUser.name).like(func.lower(bindparam("name"))))
            .order_by(OrmUser.id)
        )
        return await self.execute_query(stmt, "name", f"%{fragment}%")

    async def exists_by_email(self, email: str) -> bool:
        stmt = select(func.count()).select_from(OrmUser).where(OrmUser.email == email)
        async with self._unit_of_work("check email of") as session:
            return (await session.scalar(stmt) or 0) > 0

    async def find_all_order_by_name(self) -> list[DomainUser]:
        stmt = select(OrmUser).order_by(OrmUser.name.asc(), OrmUser.id.asc())
        return await self.execute_query(stmt)
