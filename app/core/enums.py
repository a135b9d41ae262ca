from enum import Enum


class RecycleType(str, Enum):
    USER = "user"
    ADMIN = "admin"
    STUDENT = "student"
    PARENT = "parent"
    TEACHER = "teacher"
    CLASS = "class"
    SUBJECT = "subject"
    ATTENDANCE = "attendance"
    EXAM = "exam"
    MARK = "mark"
    TIMETABLE = "timetable"
    FEE = "fee"
    NOTIFICATION = "notification"
    FEEDBACK = "feedback"


# Aggregate selector for the history view; never stored on a row.
HISTORY_AGGREGATE_TYPES = ("history", "all")


class RecycleAction(str, Enum):
    DELETED = "deleted"
    RESTORED = "restored"
    PERMANENTLY_DELETED = "permanently_deleted"


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class RecycleBinSort(str, Enum):
    DELETED_AT_DESC = "deletedAt_desc"
    DELETED_AT_ASC = "deletedAt_asc"


class HistorySort(str, Enum):
    TIMESTAMP_DESC = "timestamp_desc"
    TIMESTAMP_ASC = "timestamp_asc"
