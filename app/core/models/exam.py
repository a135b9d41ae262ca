import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin, active_unique_index


class Exam(SoftDeleteMixin, Base):
    __tablename__ = "exams"
    __table_args__ = (
        active_unique_index("uq_exams_class_subject_date_active", "class_id", "subject_id", "exam_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    exam_date = Column(Date, nullable=False)
    total_marks = Column(Integer, nullable=False, default=100)
    passing_marks = Column(Integer, nullable=False, default=35)
    # scheduled | completed | cancelled
    status = Column(String(20), nullable=False, default="scheduled")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
