"""Point-in-time JSON copies of deletable rows, used by history records and the recycle bin."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.recycle_types import RecycleEntry, resolve_name
from app.db.soft_delete import find_one

# Never copied into history
SNAPSHOT_EXCLUDE = {"password_hash"}


def to_json_value(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def serialize_row(row: Any) -> Dict[str, Any]:
    """All mapped column values of ``row`` keyed by camelCase column name."""
    data: Dict[str, Any] = {}
    for col in row.__table__.columns:
        if col.key in SNAPSHOT_EXCLUDE:
            continue
        data[to_camel(col.key)] = to_json_value(getattr(row, col.key))
    return data


async def load_linked_user(db: AsyncSession, entry: RecycleEntry, row: Any) -> Optional[User]:
    user_id = getattr(row, "user_id", None) if entry.links_user else None
    if user_id is None:
        return None
    return await find_one(db, User, {"id": user_id}, include_deleted=True)


async def build_snapshot(db: AsyncSession, entry: RecycleEntry, row: Any) -> Dict[str, Any]:
    """Serialised row plus resolved ``name`` and, for profiles, the account's email and code."""
    data = serialize_row(row)
    user = await load_linked_user(db, entry, row)
    data["name"] = resolve_name(entry, row, user)
    if user is not None:
        data["email"] = user.email
        data["userCode"] = user.user_code
    return data
