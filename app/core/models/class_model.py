import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin, active_unique_index


class SchoolClass(SoftDeleteMixin, Base):
    __tablename__ = "classes"
    __table_args__ = (
        # e.g. only one active "Grade 5" / "A"
        active_unique_index("uq_classes_name_section_active", "name", "section"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    section = Column(String(10), nullable=False, default="A")
    class_teacher_id = Column(UUID(as_uuid=True), ForeignKey("teacher_profiles.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
