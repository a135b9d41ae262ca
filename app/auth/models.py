import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin, active_unique_index


class User(SoftDeleteMixin, Base):
    """Login account. Student / parent / teacher / admin profiles link to it by user_id."""

    __tablename__ = "users"
    __table_args__ = (
        # Email and user code must be unique among active accounts only
        active_unique_index("uq_users_email_active", "email"),
        active_unique_index("uq_users_user_code_active", "user_code"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Human-facing account code, e.g. STU-2024-0001
    user_code = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    password_hash = Column(Text, nullable=False)
    # super_admin | admin | teacher | student | parent
    role = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
