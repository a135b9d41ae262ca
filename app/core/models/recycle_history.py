"""
Recycle history: append-only audit of deleted / restored / permanently_deleted actions.

item_id is not a foreign key; the row it points at may be gone. Actor and
snapshot are copied at action time and never rewritten.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Index, String, event
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class RecycleHistory(Base):
    __tablename__ = "recycle_history"
    __table_args__ = (
        Index("ix_recycle_history_type_action_ts", "type", "action", "timestamp"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    item_id = Column(String(64), nullable=False, index=True)
    type = Column(String(30), nullable=False)
    action = Column(String(30), nullable=False)
    performed_by_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    performed_by_name = Column(String(255), nullable=False, default="System")
    performed_by_email = Column(String(255), nullable=False, default="-")
    performed_by_role = Column(String(50), nullable=False, default="-")
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)
    snapshot = Column(JSON, nullable=True)


class ImmutableHistoryError(RuntimeError):
    pass


@event.listens_for(RecycleHistory, "before_update")
def _reject_update(mapper, connection, target) -> None:
    raise ImmutableHistoryError("Recycle history records are immutable")


@event.listens_for(RecycleHistory, "before_delete")
def _reject_delete(mapper, connection, target) -> None:
    raise ImmutableHistoryError("Recycle history records cannot be deleted")
