"""Single-row reads and the soft-delete operation for every deletable type."""

import logging
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.recycle_history.audit_service import log_recycle_event
from app.auth.schemas import CurrentUser
from app.core.enums import RecycleAction
from app.core.exceptions import NotFoundError
from app.core.recycle_types import RecycleEntry, get_entry, parse_item_id
from app.core.schemas import ActorInfo
from app.core.snapshot import build_snapshot
from app.db.soft_delete import find_one, utcnow

from .schemas import RecordResponse

logger = logging.getLogger(__name__)


async def _to_response(db: AsyncSession, entry: RecycleEntry, row: Any) -> RecordResponse:
    data = await build_snapshot(db, entry, row)
    deleted_by = None
    if row.is_deleted:
        deleted_by = ActorInfo(
            id=row.deleted_by_id,
            name=row.deleted_by_name or "Unknown",
            role=row.deleted_by_role or "-",
        )
    return RecordResponse(
        item_id=str(row.id),
        type=entry.key,
        name=data["name"],
        is_deleted=bool(row.is_deleted),
        deleted_at=row.deleted_at,
        deleted_by=deleted_by,
        data=data,
    )


async def get_record(
    db: AsyncSession,
    type_key: str,
    raw_id: Any,
    *,
    include_deleted: bool = False,
) -> RecordResponse:
    """Soft-deleted rows are NotFound unless include_deleted is set."""
    entry = get_entry(type_key)
    item_id = parse_item_id(raw_id)
    row = await find_one(db, entry.model, {"id": item_id}, include_deleted=include_deleted)
    if row is None:
        raise NotFoundError(f"{entry.key} '{item_id}' not found")
    return await _to_response(db, entry, row)


async def soft_delete_item(
    db: AsyncSession,
    type_key: str,
    raw_id: Any,
    actor: CurrentUser,
) -> RecordResponse:
    """
    Move one active row to the recycle bin.

    The flag flip is conditional on the row still being active, so deleting an
    already-deleted row changes nothing, appends no history and raises NotFound.
    """
    entry = get_entry(type_key)
    item_id = parse_item_id(raw_id)
    model = entry.model
    row = await find_one(db, model, {"id": item_id})
    if row is None:
        raise NotFoundError(f"{entry.key} '{item_id}' not found or already deleted")
    snapshot = await build_snapshot(db, entry, row)

    stmt = (
        update(model)
        .where(model.id == item_id, model.is_deleted.is_not(True))
        .values(
            is_deleted=True,
            deleted_at=utcnow(),
            deleted_by_id=actor.id,
            deleted_by_name=actor.name,
            deleted_by_role=actor.role,
        )
    )
    try:
        result = await db.execute(stmt)
        if result.rowcount != 1:
            await db.rollback()
            raise NotFoundError(f"{entry.key} '{item_id}' not found or already deleted")
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("soft delete failed type=%s id=%s", entry.key, item_id)
        raise

    await log_recycle_event(
        db,
        item_id=item_id,
        type_key=entry.key,
        action=RecycleAction.DELETED,
        actor=actor,
        snapshot=snapshot,
    )
    await db.commit()
    logger.info("soft deleted type=%s id=%s by=%s", entry.key, item_id, actor.id)

    row = await find_one(db, model, {"id": item_id}, include_deleted=True)
    return await _to_response(db, entry, row)
