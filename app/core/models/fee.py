import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin, active_unique_index


class Fee(SoftDeleteMixin, Base):
    __tablename__ = "fees"
    __table_args__ = (
        # One active fee record per student per class
        active_unique_index("uq_fees_student_class_active", "student_id", "class_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    due_date = Column(Date, nullable=True)
    # unpaid | partial | paid | overdue
    status = Column(String(20), nullable=False, default="unpaid")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
