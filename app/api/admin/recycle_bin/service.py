"""
Recycle bin: list soft-deleted rows of one type, restore them, or remove them for good.

Restore and hard delete run per id. Each id is checked, transitioned with a
conditional statement (WHERE is_deleted = true) and committed on its own; the
history record is appended only after that commit succeeds.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.recycle_history.audit_service import log_recycle_event
from app.auth.models import User
from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import RecycleAction, RecycleBinSort
from app.core.exceptions import ConflictError, InvalidRequestError, NotDeletedError, NotFoundError, ReferencedError
from app.core.models import Parent, RecycleHistory, SchoolClass, Student
from app.core.paging import LIKE_ESCAPE, clamp_limit, clamp_page, contains_pattern, parse_date_bound, total_pages
from app.core.recycle_types import RecycleEntry, get_entry, parse_item_id
from app.core.schemas import ActorInfo, ItemFailure, Pagination
from app.core.snapshot import build_snapshot
from app.db.soft_delete import ACTIVE_VALUES, active_unique_keys, build_where, find, find_one, with_active_only

from .schemas import BatchResult, RecycleBinItem, RecycleBinPage

logger = logging.getLogger(__name__)

# Per-id failures collected into a batch result instead of aborting it
BATCH_ITEM_ERRORS = (NotFoundError, NotDeletedError, ConflictError, ReferencedError)


def _normalize_sort(sort_by: Optional[str]) -> RecycleBinSort:
    try:
        return RecycleBinSort(sort_by)
    except ValueError:
        return RecycleBinSort.DELETED_AT_DESC


def _unique_ids(ids: Iterable[Any]) -> List[str]:
    return list(dict.fromkeys(str(i).strip() for i in ids))


def _check_batch(ids: List[str], max_size: int, verb: str) -> None:
    if not ids:
        raise InvalidRequestError("'ids' must be a non-empty array")
    if len(ids) > max_size:
        raise InvalidRequestError(f"Cannot {verb} more than {max_size} items at once")


# ----- Listing -----


def _apply_listing_filters(stmt, entry: RecycleEntry, start, end, term: str):
    model = entry.model
    stmt = stmt.where(*build_where(model, {"is_deleted": True}))
    if start is not None:
        stmt = stmt.where(model.deleted_at >= start)
    if end is not None:
        stmt = stmt.where(model.deleted_at <= end)
    if term:
        pattern = contains_pattern(term)
        columns = [getattr(model, field) for field in entry.search_fields]
        if entry.links_user:
            columns.extend([User.name, User.email, User.user_code])
        stmt = stmt.where(or_(*[col.ilike(pattern, escape=LIKE_ESCAPE) for col in columns]))
    return stmt


async def _latest_delete_events(
    db: AsyncSession, type_key: str, item_ids: List[str]
) -> Dict[str, RecycleHistory]:
    """Most recent 'deleted' history record per item, to fill in the actor's email."""
    if not item_ids:
        return {}
    result = await db.execute(
        select(RecycleHistory)
        .where(
            RecycleHistory.type == type_key,
            RecycleHistory.action == RecycleAction.DELETED.value,
            RecycleHistory.item_id.in_(item_ids),
        )
        .order_by(RecycleHistory.timestamp.asc())
    )
    latest: Dict[str, RecycleHistory] = {}
    for record in result.scalars().all():
        latest[record.item_id] = record
    return latest


def _deleted_by(row: Any, event: Optional[RecycleHistory]) -> ActorInfo:
    if row.deleted_by_name or row.deleted_by_id:
        return ActorInfo(
            id=row.deleted_by_id,
            name=row.deleted_by_name or "Unknown",
            email=event.performed_by_email if event is not None else "-",
            role=row.deleted_by_role or "-",
        )
    if event is not None:
        return ActorInfo(
            id=event.performed_by_id,
            name=event.performed_by_name,
            email=event.performed_by_email,
            role=event.performed_by_role,
        )
    return ActorInfo(name="Unknown")


async def _enrich_snapshot(db: AsyncSession, entry: RecycleEntry, row: Any, snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve raw links into readable names for the recycle-bin detail view."""
    if entry.key == "student":
        if row.parent_id is not None:
            parent = await find_one(db, Parent, {"id": row.parent_id}, include_deleted=True)
            parent_user = None
            if parent is not None and parent.user_id is not None:
                parent_user = await find_one(db, User, {"id": parent.user_id}, include_deleted=True)
            snapshot["fatherName"] = parent.father_name if parent else None
            snapshot["motherName"] = parent.mother_name if parent else None
            snapshot["parentName"] = (
                (parent_user.name if parent_user else None)
                or (parent.father_name if parent else None)
                or "-"
            )
        if row.class_id is not None:
            school_class = await find_one(db, SchoolClass, {"id": row.class_id}, include_deleted=True)
            snapshot["classLabel"] = (
                f"{school_class.name} {school_class.section}" if school_class else str(row.class_id)
            )
    elif entry.key == "parent":
        children = await find(db, Student, {"parent_id": row.id}, include_deleted=True)
        user_ids = [c.user_id for c in children if c.user_id is not None]
        users = await find(db, User, {"id": user_ids}, include_deleted=True) if user_ids else []
        names = {u.id: u.name for u in users}
        snapshot["childrenDetails"] = [
            {
                "id": str(child.id),
                "name": names.get(child.user_id) or child.admission_number or "Unknown Student",
                "admissionNumber": child.admission_number or "-",
            }
            for child in children
        ]
        snapshot["childrenCount"] = len(children)
    return snapshot


async def list_deleted_items(
    db: AsyncSession,
    type_key: str,
    *,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
    search: Optional[str] = "",
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    sort_by: Optional[str] = None,
) -> RecycleBinPage:
    """Paginated soft-deleted rows of one type. Empty pages are not errors; bad paging values are clamped."""
    entry = get_entry(type_key)
    page = clamp_page(page)
    limit = clamp_limit(limit)
    start = parse_date_bound(from_date, "fromDate")
    end = parse_date_bound(to_date, "toDate", end=True)
    term = (search or "").strip()
    model = entry.model

    if entry.links_user:
        stmt = select(model, User).outerjoin(User, model.user_id == User.id)
        count_stmt = select(func.count(model.id)).outerjoin(User, model.user_id == User.id)
    else:
        stmt = select(model)
        count_stmt = select(func.count(model.id))
    stmt = _apply_listing_filters(stmt, entry, start, end, term)
    count_stmt = _apply_listing_filters(count_stmt, entry, start, end, term)

    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    if _normalize_sort(sort_by) == RecycleBinSort.DELETED_AT_ASC:
        stmt = stmt.order_by(model.deleted_at.asc(), model.id.asc())
    else:
        stmt = stmt.order_by(model.deleted_at.desc(), model.id.asc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    rows = (await db.execute(stmt)).all()

    events = await _latest_delete_events(db, entry.key, [str(r[0].id) for r in rows])
    items: List[RecycleBinItem] = []
    for r in rows:
        obj = r[0]
        snapshot = await build_snapshot(db, entry, obj)
        snapshot = await _enrich_snapshot(db, entry, obj, snapshot)
        items.append(
            RecycleBinItem(
                item_id=str(obj.id),
                type=entry.key,
                name=snapshot["name"],
                email=snapshot.get("email"),
                deleted_at=obj.deleted_at,
                deleted_by=_deleted_by(obj, events.get(str(obj.id))),
                snapshot=snapshot,
            )
        )

    return RecycleBinPage(
        items=items,
        pagination=Pagination(total=total, page=page, limit=limit, total_pages=total_pages(total, limit)),
    )


# ----- Restore / hard delete -----


async def _load_deleted_row(db: AsyncSession, entry: RecycleEntry, raw_id: Any):
    item_id = parse_item_id(raw_id)
    row = await find_one(db, entry.model, {"id": item_id}, include_deleted=True)
    if row is None:
        raise NotFoundError(f"{entry.key} '{item_id}' not found")
    if not row.is_deleted:
        raise NotDeletedError(f"{entry.key} '{item_id}' is already active")
    return item_id, row


async def _ensure_no_active_conflict(db: AsyncSession, entry: RecycleEntry, row: Any) -> None:
    """Restoring must not produce a second active row on any active-only unique key."""
    model = entry.model
    for columns in active_unique_keys(model):
        values = {col: getattr(row, col) for col in columns}
        if any(v is None for v in values.values()):
            # NULL never collides in a unique index
            continue
        stmt = (
            select(model.id)
            .where(*build_where(model, with_active_only(values)), model.id != row.id)
            .limit(1)
        )
        if (await db.execute(stmt)).first() is not None:
            key = ", ".join(f"{col}={values[col]}" for col in columns)
            raise ConflictError(f"Cannot restore {entry.key} '{row.id}': an active {entry.key} already has {key}")


async def restore_item(db: AsyncSession, entry: RecycleEntry, raw_id: Any, actor: Optional[CurrentUser]) -> str:
    item_id, row = await _load_deleted_row(db, entry, raw_id)
    snapshot = await build_snapshot(db, entry, row)
    await _ensure_no_active_conflict(db, entry, row)

    model = entry.model
    stmt = update(model).where(model.id == item_id, model.is_deleted.is_(True)).values(**ACTIVE_VALUES)
    try:
        result = await db.execute(stmt)
        if result.rowcount != 1:
            await db.rollback()
            # Another request restored or removed it between the read and the update
            raise NotDeletedError(f"{entry.key} '{item_id}' is no longer in the recycle bin")
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Cannot restore {entry.key} '{item_id}': it collides with an active {entry.key}")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("restore failed type=%s id=%s", entry.key, item_id)
        raise

    await log_recycle_event(
        db,
        item_id=item_id,
        type_key=entry.key,
        action=RecycleAction.RESTORED,
        actor=actor,
        snapshot=snapshot,
    )
    await db.commit()
    logger.info("restored type=%s id=%s by=%s", entry.key, item_id, actor.id if actor else None)
    return str(item_id)


async def hard_delete_item(db: AsyncSession, entry: RecycleEntry, raw_id: Any, actor: Optional[CurrentUser]) -> str:
    item_id, row = await _load_deleted_row(db, entry, raw_id)
    # Last surviving copy of the row
    snapshot = await build_snapshot(db, entry, row)

    model = entry.model
    stmt = delete(model).where(model.id == item_id, model.is_deleted.is_(True))
    try:
        result = await db.execute(stmt)
        if result.rowcount != 1:
            await db.rollback()
            raise NotDeletedError(f"{entry.key} '{item_id}' is no longer in the recycle bin")
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ReferencedError(f"Cannot permanently delete {entry.key} '{item_id}': other records still reference it")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("hard delete failed type=%s id=%s", entry.key, item_id)
        raise

    await log_recycle_event(
        db,
        item_id=item_id,
        type_key=entry.key,
        action=RecycleAction.PERMANENTLY_DELETED,
        actor=actor,
        snapshot=snapshot,
    )
    await db.commit()
    logger.info("permanently deleted type=%s id=%s by=%s", entry.key, item_id, actor.id if actor else None)
    return str(item_id)


async def _run_batch(db: AsyncSession, entry: RecycleEntry, ids: List[str], actor, operation, verb: str) -> BatchResult:
    result = BatchResult(requested=len(ids))
    for raw_id in ids:
        try:
            item_id = await operation(db, entry, raw_id, actor)
        except BATCH_ITEM_ERRORS as e:
            logger.warning("%s failed type=%s id=%s reason=%s", verb, entry.key, raw_id, e.reason)
            result.failures.append(ItemFailure(id=raw_id, reason=e.reason, message=e.message))
            continue
        result.succeeded.append(item_id)
    return result


async def restore_items(
    db: AsyncSession, type_key: str, ids: Iterable[Any], actor: Optional[CurrentUser]
) -> BatchResult:
    """Restore soft-deleted rows of one type. Strictly per id: linked rows are not restored with it."""
    entry = get_entry(type_key)
    unique = _unique_ids(ids)
    _check_batch(unique, settings.recycle_bin_max_restore_batch, "restore")
    return await _run_batch(db, entry, unique, actor, restore_item, "restore")


async def hard_delete_items(
    db: AsyncSession, type_key: str, ids: Iterable[Any], actor: Optional[CurrentUser]
) -> BatchResult:
    """Physically remove soft-deleted rows of one type. Active rows are never removed here."""
    entry = get_entry(type_key)
    unique = _unique_ids(ids)
    _check_batch(unique, settings.recycle_bin_max_hard_delete_batch, "permanently delete")
    return await _run_batch(db, entry, unique, actor, hard_delete_item, "hard delete")


def summarize(result: BatchResult, verb: str) -> str:
    """e.g. 'Restored 3 of 4 item(s); 1 failed (NotDeleted)'."""
    message = f"{verb} {result.success_count} of {result.requested} item(s)"
    if result.failures:
        reasons = sorted({f.reason for f in result.failures})
        message += f"; {len(result.failures)} failed ({', '.join(reasons)})"
    return message
