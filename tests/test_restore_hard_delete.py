from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.records.service import soft_delete_item
from app.api.admin.recycle_bin.service import (
    hard_delete_items,
    list_deleted_items,
    restore_items,
    summarize,
)
from app.core.exceptions import InvalidRequestError, InvalidTypeError
from app.core.models import ImmutableHistoryError, RecycleHistory, Subject
from app.core.snapshot import serialize_row
from app.db.soft_delete import SOFT_DELETE_FIELDS, find_one, is_consistent


async def _actions(db: AsyncSession, item_id) -> list:
    result = await db.execute(
        select(RecycleHistory.action)
        .where(RecycleHistory.item_id == str(item_id))
        .order_by(RecycleHistory.timestamp.asc())
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_delete_restore_hard_delete_lifecycle(
    client: AsyncClient, db_session: AsyncSession, factory, auth_headers
) -> None:
    first = await factory.student(await factory.user("Meera Das"))
    second = await factory.student(await factory.user("Rohan Das"))
    first_id, second_id = str(first.id), str(second.id)

    for item_id in (first_id, second_id):
        response = await client.delete(f"/api/admin/records/student/{item_id}", headers=auth_headers)
        assert response.status_code == 200

    history = await client.get("/api/admin/recycle-history", params={"itemId": first_id}, headers=auth_headers)
    assert [h["action"] for h in history.json()["data"]] == ["deleted"]

    restored = await client.post(
        "/api/admin/recycle-bin/restore",
        json={"type": "student", "ids": [first_id]},
        headers=auth_headers,
    )
    assert restored.status_code == 200
    assert restored.json()["restoredCount"] == 1
    assert await _actions(db_session, first_id) == ["deleted", "restored"]

    listing = await client.get("/api/admin/recycle-bin", params={"type": "student"}, headers=auth_headers)
    assert [item["itemId"] for item in listing.json()["data"]] == [second_id]

    removed = await client.request(
        "DELETE",
        "/api/admin/recycle-bin/hard-delete",
        json={"type": "student", "ids": [second_id]},
        headers=auth_headers,
    )
    assert removed.status_code == 200
    assert removed.json()["deletedCount"] == 1
    assert await _actions(db_session, second_id) == ["deleted", "permanently_deleted"]

    gone = await client.get(
        f"/api/admin/records/student/{second_id}",
        params={"includeDeleted": "true"},
        headers=auth_headers,
    )
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_batch_restore_reports_partial_failure(db_session: AsyncSession, factory, admin_actor) -> None:
    deleted = await factory.subject("Civics", "CIV", deleted=True)
    active = await factory.subject("Hindi", "HIN")
    deleted_id, active_id = str(deleted.id), str(active.id)
    missing_id = str(uuid4())

    result = await restore_items(db_session, "subject", [deleted_id, active_id, missing_id], admin_actor)

    assert result.requested == 3
    assert result.success_count == 1
    assert result.succeeded == [deleted_id]
    reasons = {f.id: f.reason for f in result.failures}
    assert reasons == {active_id: "NotDeleted", missing_id: "NotFound"}
    assert summarize(result, "Restored") == "Restored 1 of 3 item(s); 2 failed (NotDeleted, NotFound)"

    row = await find_one(db_session, Subject, {"id": deleted.id})
    assert row is not None
    assert row.deleted_at is None
    assert row.deleted_by_name is None
    assert is_consistent(row)
    # No history for failed ids
    assert await _actions(db_session, active_id) == []


@pytest.mark.asyncio
async def test_restore_endpoint_failures_shape(client: AsyncClient, factory, auth_headers) -> None:
    deleted = await factory.subject("Sanskrit", "SAN", deleted=True)
    active = await factory.subject("Tamil", "TAM")

    response = await client.post(
        "/api/admin/recycle-bin/restore",
        json={"type": "subject", "ids": [str(deleted.id), str(active.id)]},
        headers=auth_headers,
    )
    body = response.json()
    assert response.status_code == 200
    assert body["restoredCount"] == 1
    assert body["failed"] == 1
    assert body["failures"][0]["id"] == str(active.id)
    assert body["failures"][0]["reason"] == "NotDeleted"
    assert body["message"].startswith("Restored 1 of 2")


@pytest.mark.asyncio
async def test_restore_round_trip_matches_pre_delete_state(
    db_session: AsyncSession, factory, admin_actor
) -> None:
    subject = await factory.subject("Statistics", "STA")
    subject_id = subject.id
    before = serialize_row(subject)

    await soft_delete_item(db_session, "subject", subject_id, admin_actor)
    await restore_items(db_session, "subject", [str(subject_id)], admin_actor)

    after = serialize_row(await find_one(db_session, Subject, {"id": subject_id}))
    assert after == before


@pytest.mark.asyncio
async def test_restore_conflicts_with_active_natural_key(
    db_session: AsyncSession, factory, admin_actor
) -> None:
    old = await factory.subject("Computer Science", "CS", deleted=True)
    await factory.subject("Computer Science", "CS")
    old_id = str(old.id)

    result = await restore_items(db_session, "subject", [old_id], admin_actor)

    assert result.success_count == 0
    assert result.failures[0].reason == "Conflict"
    row = await find_one(db_session, Subject, {"id": old.id}, include_deleted=True)
    assert row.is_deleted is True
    assert await _actions(db_session, old_id) == []


@pytest.mark.asyncio
async def test_restore_conflict_on_shared_user_profile(
    db_session: AsyncSession, factory, admin_actor
) -> None:
    user = await factory.user("Nila Bose")
    old_profile = await factory.student(user, deleted=True)
    await factory.student(user)

    result = await restore_items(db_session, "student", [str(old_profile.id)], admin_actor)

    assert [f.reason for f in result.failures] == ["Conflict"]


@pytest.mark.asyncio
async def test_hard_delete_refuses_active_rows(db_session: AsyncSession, factory, admin_actor) -> None:
    active = await factory.subject("Yoga", "YOG")
    active_id = str(active.id)

    result = await hard_delete_items(db_session, "subject", [active_id], admin_actor)

    assert result.success_count == 0
    assert result.failures[0].reason == "NotDeleted"
    assert await find_one(db_session, Subject, {"id": active.id}) is not None


@pytest.mark.asyncio
async def test_hard_delete_is_terminal(db_session: AsyncSession, factory, admin_actor) -> None:
    subject = await factory.subject("Latin", "LAT", deleted=True)
    subject_id = str(subject.id)

    result = await hard_delete_items(db_session, "subject", [subject_id], admin_actor)
    assert result.success_count == 1

    again = await restore_items(db_session, "subject", [subject_id], admin_actor)
    assert again.failures[0].reason == "NotFound"

    records = (
        await db_session.execute(select(RecycleHistory).where(RecycleHistory.item_id == subject_id))
    ).scalars().all()
    assert len(records) == 1
    assert records[0].action == "permanently_deleted"
    # Last surviving copy of the row
    assert records[0].snapshot["code"] == "LAT"
    assert records[0].snapshot["isDeleted"] is True


@pytest.mark.asyncio
async def test_duplicate_ids_are_processed_once(db_session: AsyncSession, factory, admin_actor) -> None:
    subject = await factory.subject("Dance", "DAN", deleted=True)
    subject_id = str(subject.id)

    result = await restore_items(db_session, "subject", [subject_id, subject_id], admin_actor)

    assert result.requested == 1
    assert await _actions(db_session, subject_id) == ["restored"]


@pytest.mark.asyncio
async def test_batch_validation(db_session: AsyncSession, admin_actor) -> None:
    with pytest.raises(InvalidTypeError):
        await restore_items(db_session, "history", [str(uuid4())], admin_actor)
    with pytest.raises(InvalidRequestError):
        await restore_items(db_session, "subject", [], admin_actor)
    with pytest.raises(InvalidRequestError):
        await hard_delete_items(db_session, "subject", [str(uuid4()) for _ in range(51)], admin_actor)


@pytest.mark.asyncio
async def test_history_records_are_immutable(db_session: AsyncSession, factory, admin_actor) -> None:
    subject = await factory.subject("Logic", "LOG")
    await soft_delete_item(db_session, "subject", subject.id, admin_actor)

    record = (await db_session.execute(select(RecycleHistory))).scalars().one()
    record.action = "restored"
    with pytest.raises(ImmutableHistoryError):
        await db_session.flush()
    await db_session.rollback()

    record = (await db_session.execute(select(RecycleHistory))).scalars().one()
    await db_session.delete(record)
    with pytest.raises(ImmutableHistoryError):
        await db_session.flush()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_soft_delete_fields_cleared_by_restore(db_session: AsyncSession, factory, admin_actor) -> None:
    subject = await factory.subject("Ethics", "ETH", deleted=True, actor=admin_actor)

    await restore_items(db_session, "subject", [str(subject.id)], admin_actor)

    row = await find_one(db_session, Subject, {"id": subject.id})
    for field in SOFT_DELETE_FIELDS[1:]:
        assert getattr(row, field) is None
    page = await list_deleted_items(db_session, "subject")
    assert page.pagination.total == 0


@pytest.mark.asyncio
async def test_hard_delete_blocked_by_reference_is_reported(
    db_session: AsyncSession, factory, admin_actor, monkeypatch
) -> None:
    subject = await factory.subject("Geology", "GEO", deleted=True)
    subject_id = str(subject.id)
    execute = db_session.execute

    async def refuse_delete(statement, *args, **kwargs):
        if getattr(statement, "is_delete", False):
            raise IntegrityError("DELETE FROM subjects", {}, Exception("FOREIGN KEY constraint failed"))
        return await execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", refuse_delete)

    result = await hard_delete_items(db_session, "subject", [subject_id], admin_actor)

    assert result.success_count == 0
    assert [f.reason for f in result.failures] == ["Referenced"]
    assert "still reference" in result.failures[0].message
    assert await _actions(db_session, subject_id) == []
    row = await find_one(db_session, Subject, {"id": subject.id}, include_deleted=True)
    assert row is not None and row.is_deleted is True
