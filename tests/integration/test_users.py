"""User store and UserService scenarios against in-memory SQLite."""

import pytest

from src.domain.exceptions import ConflictError, NotFoundError, StoreError, StoreErrorKind
from src.domain.models.enums import UserRole
from src.domain.models.users import User
from src.domain.services.users import UserService


@pytest.fixture
async def ana_and_beto(users):
    ana = await users.save(User.create("Ana", "ana@x.com", "h1"))
    beto = await users.save(User.create("Beto", "beto@x.com", "h2"))
    return ana, beto


async def test_first_user_scenario(users):
    saved = await users.save(User.create("Ana", "ana@x.com", "hashed", UserRole.USER))
    assert saved.id is not None
    assert await users.count() == 1
    assert await users.find_by_email("ana@x.com") == saved


async def test_find_by_email_absent(users):
    assert await users.find_by_email("nobody@x.com") is None


async def test_find_by_email_is_exact(users, ana_and_beto):
    assert await users.find_by_email("ANA@x.com") is None


async def test_find_by_name_containing_is_case_insensitive(users, ana_and_beto):
    ana, _ = ana_and_beto
    assert await users.find_by_name_containing("an") == [ana]
    assert await users.find_by_name_containing("AN") == [ana]


async def test_find_by_name_containing_no_match(users, ana_and_beto):
    assert await users.find_by_name_containing("zz") == []


async def test_exists_by_email_follows_lifecycle(users):
    saved = await users.save(User.create("Ana", "ana@x.com", "h"))
    assert await users.exists_by_email("ana@x.com") is True
    await users.delete_by_id(saved.id)
    assert await users.exists_by_email("ana@x.com") is False


async def test_update_user_name_keeps_email(users, fresh_users, ana_and_beto):
    ana, _ = ana_and_beto
    await users.update_user_name(ana.id, "Ana Maria")
    stored = await fresh_users().find_by_id(ana.id)
    assert stored.name == "Ana Maria"
    assert stored.email == "ana@x.com"


async def test_update_user_name_unknown_id(users):
    with pytest.raises(NotFoundError):
        await users.update_user_name(404, "Ghost")


async def test_update_user_email_conflict_leaves_email_unchanged(users, fresh_users, ana_and_beto):
    ana, _ = ana_and_beto
    with pytest.raises(ConflictError):
        await users.update_user_email(ana.id, "beto@x.com")
    assert (await fresh_users().find_by_id(ana.id)).email == "ana@x.com"


async def test_update_user_email_success(users, fresh_users, ana_and_beto):
    ana, _ = ana_and_beto
    await users.update_user_email(ana.id, "ana.maria@x.com")
    other = fresh_users()
    assert (await other.find_by_id(ana.id)).email == "ana.maria@x.com"
    assert await other.exists_by_email("ana@x.com") is False


async def test_find_all_order_by_name(users):
    for name in ("Carla", "Ana", "Beto"):
        await users.save(User.create(name, f"{name.lower()}@x.com", "h"))
    assert [u.name for u in await users.find_all_order_by_name()] == ["Ana", "Beto", "Carla"]


async def test_unique_constraint_catches_writers_that_skip_the_check(users, ana_and_beto):
    _, beto = ana_and_beto
    with pytest.raises(StoreError) as exc_info:
        await users.update(beto.with_email("ana@x.com"))
    assert exc_info.value.kind is StoreErrorKind.CONSTRAINT_VIOLATION


# --- UserService end to end ---

async def test_service_register_then_duplicate(users):
    service = UserService(users)
    await service.register("Ana", "ana@x.com", "hashed")
    with pytest.raises(ConflictError):
        await service.register("Ana Two", "ana@x.com", "hashed")
    assert await service.count() == 1


async def test_service_replace_and_delete(users, ana_and_beto):
    ana, _ = ana_and_beto
    service = UserService(users)
    updated = await service.replace(
        ana.id, User(name="Ana Maria", email="am@x.com", password="h9", role=UserRole.ADMIN)
    )
    assert updated.role is UserRole.ADMIN
    await service.delete(ana.id)
    with pytest.raises(NotFoundError):
        await service.get(ana.id)


async def test_service_replace_rejects_taken_email(users, ana_and_beto):
    ana, _ = ana_and_beto
    with pytest.raises(ConflictError):
        await UserService(users).replace(ana.id, ana.with_email("beto@x.com"))


async def test_service_list_page(users):
    for i in range(12):
        await users.save(User.create(f"User {i:02d}", f"u{i}@x.com", "h"))
    service = UserService(users)
    assert len(await service.list_page()) == 10
    assert len(await service.list_page(page=1)) == 2
