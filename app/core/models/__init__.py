from app.core.models.profiles import AdminProfile, Parent, Student, TeacherProfile
from app.core.models.class_model import SchoolClass
from app.core.models.subject import Subject
from app.core.models.attendance import Attendance
from app.core.models.exam import Exam
from app.core.models.mark import Mark
from app.core.models.timetable import Timetable
from app.core.models.fee import Fee
from app.core.models.notification import Notification
from app.core.models.feedback import Feedback
from app.core.models.recycle_history import ImmutableHistoryError, RecycleHistory

__all__ = [
    "AdminProfile",
    "Attendance",
    "Exam",
    "Fee",
    "Feedback",
    "ImmutableHistoryError",
    "Mark",
    "Notification",
    "Parent",
    "RecycleHistory",
    "SchoolClass",
    "Student",
    "Subject",
    "TeacherProfile",
    "Timetable",
]
