import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin


class Feedback(SoftDeleteMixin, Base):
    __tablename__ = "feedback"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # complaint | suggestion | appreciation
    type = Column(String(20), nullable=False, default="suggestion")
    # open | in_review | resolved
    status = Column(String(20), nullable=False, default="open")
    priority = Column(String(10), nullable=False, default="medium")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
