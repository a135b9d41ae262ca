"""
Recycle history writer. Call once per confirmed state transition, after the
transition has been committed.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import CurrentUser
from app.core.enums import RecycleAction
from app.core.models import RecycleHistory


async def log_recycle_event(
    db: AsyncSession,
    *,
    item_id: Any,
    type_key: str,
    action: RecycleAction,
    actor: Optional[CurrentUser],
    snapshot: Optional[Dict[str, Any]],
) -> RecycleHistory:
    """Append one history record. Caller must commit."""
    entry = RecycleHistory(
        item_id=str(item_id),
        type=type_key,
        action=action.value,
        performed_by_id=actor.id if actor else None,
        performed_by_name=(actor.name if actor else None) or "System",
        performed_by_email=(actor.email if actor else None) or "-",
        performed_by_role=(actor.role if actor else None) or "-",
        timestamp=datetime.utcnow(),
        snapshot=snapshot,
    )
    db.add(entry)
    return entry
