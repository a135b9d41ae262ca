"""Account profiles: admin, student, parent and teacher rows linked to a users row."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.db.soft_delete import SoftDeleteMixin, active_unique_index


class AdminProfile(SoftDeleteMixin, Base):
    __tablename__ = "admin_profiles"
    __table_args__ = (
        # One active profile per account
        active_unique_index("uq_admin_profiles_user_active", "user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    department = Column(String(100), nullable=True, default="Administration")
    designation = Column(String(100), nullable=False)
    joining_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])


class Parent(SoftDeleteMixin, Base):
    __tablename__ = "parents"
    __table_args__ = (active_unique_index("uq_parents_user_active", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    father_name = Column(String(100), nullable=True)
    father_phone = Column(String(50), nullable=True)
    mother_name = Column(String(100), nullable=True)
    mother_phone = Column(String(50), nullable=True)
    occupation = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    children = relationship("Student", back_populates="parent", foreign_keys="Student.parent_id")


class Student(SoftDeleteMixin, Base):
    __tablename__ = "students"
    __table_args__ = (
        active_unique_index("uq_students_user_active", "user_id"),
        active_unique_index("uq_students_admission_number_active", "admission_number"),
        # Roll number is unique within class and academic year
        active_unique_index("uq_students_roll_active", "class_id", "academic_year", "roll_number"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    parent_id = Column(UUID(as_uuid=True), ForeignKey("parents.id", ondelete="SET NULL"), nullable=True)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    admission_number = Column(String(50), nullable=True)
    roll_number = Column(String(20), nullable=False)
    academic_year = Column(String(20), nullable=False)
    gender = Column(String(10), nullable=True)
    dob = Column(Date, nullable=True)
    # active | inactive | suspended
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    parent = relationship("Parent", back_populates="children", foreign_keys=[parent_id])
    school_class = relationship("SchoolClass", foreign_keys=[class_id])


class TeacherProfile(SoftDeleteMixin, Base):
    __tablename__ = "teacher_profiles"
    __table_args__ = (
        active_unique_index("uq_teacher_profiles_user_active", "user_id"),
        active_unique_index("uq_teacher_profiles_employee_id_active", "employee_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    employee_id = Column(String(50), nullable=False)
    name = Column(String(255), nullable=True)
    designation = Column(String(100), nullable=False)
    department = Column(String(100), nullable=True)
    joining_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
