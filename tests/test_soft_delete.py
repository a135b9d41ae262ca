import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.models import Student, Subject
from app.db.soft_delete import (
    active_unique_keys,
    count,
    find,
    find_one,
    is_consistent,
    with_active_only,
)


def test_with_active_only_adds_exclusion() -> None:
    assert with_active_only({"name": "Maths"}) == {"name": "Maths", "is_deleted": False}
    assert with_active_only(None) == {"is_deleted": False}


def test_with_active_only_respects_override_and_explicit_value() -> None:
    filters = {"name": "Maths"}
    assert with_active_only(filters, include_deleted=True) == {"name": "Maths"}
    assert with_active_only({"is_deleted": True}) == {"is_deleted": True}
    # Input is never mutated
    assert filters == {"name": "Maths"}


def test_active_unique_keys_lists_partial_indexes() -> None:
    assert active_unique_keys(User) == [("email",), ("user_code",)]
    assert ("admission_number",) in active_unique_keys(Student)


@pytest.mark.asyncio
async def test_find_hides_deleted_rows_by_default(db_session: AsyncSession, factory) -> None:
    await factory.subject("Physics", "PHY")
    await factory.subject("Chemistry", "CHE", deleted=True)

    active = await find(db_session, Subject)
    assert [s.code for s in active] == ["PHY"]
    assert await count(db_session, Subject) == 1
    assert await count(db_session, Subject, include_deleted=True) == 2

    deleted = await find(db_session, Subject, {"is_deleted": True})
    assert [s.code for s in deleted] == ["CHE"]


@pytest.mark.asyncio
async def test_find_one_with_include_deleted(db_session: AsyncSession, factory) -> None:
    subject = await factory.subject("History", "HIS", deleted=True)

    assert await find_one(db_session, Subject, {"id": subject.id}) is None
    found = await find_one(db_session, Subject, {"id": subject.id}, include_deleted=True)
    assert found is not None
    assert found.is_deleted is True
    assert is_consistent(found)


@pytest.mark.asyncio
async def test_deleted_rows_may_share_natural_key(db_session: AsyncSession, factory) -> None:
    await factory.subject("Biology", "BIO", deleted=True)
    await factory.subject("Biology (old)", "BIO", deleted=True)
    await factory.subject("Biology", "BIO")

    assert await count(db_session, Subject, {"code": "BIO"}, include_deleted=True) == 3
    assert await count(db_session, Subject, {"code": "BIO"}) == 1
