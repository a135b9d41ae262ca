"""Read-only queries over the recycle history log."""

from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import HISTORY_AGGREGATE_TYPES, HistorySort, RecycleAction
from app.core.exceptions import InvalidRequestError
from app.core.models import RecycleHistory
from app.core.paging import LIKE_ESCAPE, clamp_limit, clamp_page, contains_pattern, parse_date_bound, total_pages
from app.core.recycle_types import get_entry, normalize_type
from app.core.schemas import ActorInfo, Pagination

from .schemas import HistoryItem, HistoryPage

_ALLOWED_ACTIONS = [a.value for a in RecycleAction]

# Snapshot keys a free-text search looks into, besides the actor and item id
SNAPSHOT_SEARCH_KEYS = ("name", "email", "userCode", "userId", "admissionNumber")


def parse_actions(action: Optional[str]) -> List[str]:
    """'deleted,restored' -> ['deleted', 'restored']. Unknown values are rejected."""
    if not action:
        return []
    actions = [a.strip().lower() for a in str(action).split(",") if a.strip()]
    invalid = [a for a in actions if a not in _ALLOWED_ACTIONS]
    if invalid:
        raise InvalidRequestError(
            f"Invalid action(s): {', '.join(invalid)}. Allowed: {', '.join(_ALLOWED_ACTIONS)}"
        )
    return list(dict.fromkeys(actions))


def _to_item(record: RecycleHistory) -> HistoryItem:
    return HistoryItem(
        id=record.id,
        item_id=record.item_id,
        type=record.type,
        action=record.action,
        timestamp=record.timestamp,
        performed_by=ActorInfo(
            id=record.performed_by_id,
            name=record.performed_by_name or "System",
            email=record.performed_by_email or "-",
            role=record.performed_by_role or "-",
        ),
        snapshot=record.snapshot,
    )


async def list_history(
    db: AsyncSession,
    *,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
    type_key: Optional[str] = None,
    item_id: Optional[str] = None,
    action: Optional[str] = None,
    search: Optional[str] = "",
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    sort_by: Optional[str] = None,
) -> HistoryPage:
    """
    Filtered, paginated history. type omitted or 'history' means every type;
    itemId gives the full trail of one row; search matches the actor's name or
    email, the item id, or the name, email, user code, user id or admission number
    recorded in the snapshot.
    """
    page = clamp_page(page)
    limit = clamp_limit(limit)

    stmt = select(RecycleHistory)
    key = normalize_type(type_key)
    if key and key not in HISTORY_AGGREGATE_TYPES:
        stmt = stmt.where(RecycleHistory.type == get_entry(key).key)
    if item_id and str(item_id).strip():
        stmt = stmt.where(RecycleHistory.item_id == str(item_id).strip())
    actions = parse_actions(action)
    if actions:
        stmt = stmt.where(RecycleHistory.action.in_(actions))
    start = parse_date_bound(from_date, "fromDate")
    end = parse_date_bound(to_date, "toDate", end=True)
    if start is not None:
        stmt = stmt.where(RecycleHistory.timestamp >= start)
    if end is not None:
        stmt = stmt.where(RecycleHistory.timestamp <= end)
    term = (search or "").strip()
    if term:
        pattern = contains_pattern(term)
        columns = [
            RecycleHistory.performed_by_name,
            RecycleHistory.performed_by_email,
            RecycleHistory.item_id,
        ]
        columns.extend(RecycleHistory.snapshot[field].as_string() for field in SNAPSHOT_SEARCH_KEYS)
        stmt = stmt.where(or_(*[col.ilike(pattern, escape=LIKE_ESCAPE) for col in columns]))

    total_result = await db.execute(select(func.count()).select_from(stmt.subquery()))
    total = total_result.scalar() or 0

    if sort_by == HistorySort.TIMESTAMP_ASC.value:
        stmt = stmt.order_by(RecycleHistory.timestamp.asc(), RecycleHistory.id.asc())
    else:
        stmt = stmt.order_by(RecycleHistory.timestamp.desc(), RecycleHistory.id.asc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    result = await db.execute(stmt)
    items = [_to_item(r) for r in result.scalars().all()]

    return HistoryPage(
        items=items,
        pagination=Pagination(total=total, page=page, limit=limit, total_pages=total_pages(total, limit)),
    )
