"""Daily attendance per student and class."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin, active_unique_index


class Attendance(SoftDeleteMixin, Base):
    __tablename__ = "attendance"
    __table_args__ = (
        active_unique_index("uq_attendance_student_class_date_active", "student_id", "class_id", "date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    date = Column(Date, nullable=False)
    # present | absent | late | excused
    status = Column(String(20), nullable=False)
    remarks = Column(Text, nullable=True)
    marked_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
