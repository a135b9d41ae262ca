"""
Registry of deletable types: which model backs each recycle-bin type, what
the listing searches on, and how a display name is resolved.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

from app.auth.models import User
from app.core.enums import RecycleType
from app.core.exceptions import InvalidTypeError, NotFoundError
from app.core.models import (
    AdminProfile,
    Attendance,
    Exam,
    Fee,
    Feedback,
    Mark,
    Notification,
    Parent,
    SchoolClass,
    Student,
    Subject,
    TeacherProfile,
    Timetable,
)

UNKNOWN_NAME = "Unknown"

NameResolver = Callable[[Any], Optional[str]]


def _field(name: str) -> NameResolver:
    def resolve(row: Any) -> Optional[str]:
        value = getattr(row, name, None)
        return str(value) if value is not None else None

    return resolve


def _template(fmt: str, *fields: str) -> NameResolver:
    """Format ``fmt`` with the given fields; skipped when any field is empty."""

    def resolve(row: Any) -> Optional[str]:
        values = [getattr(row, f, None) for f in fields]
        if any(v is None or v == "" for v in values):
            return None
        return fmt.format(*values)

    return resolve


@dataclass(frozen=True)
class RecycleEntry:
    key: str
    model: Any
    # String columns searched (ilike) by the recycle-bin listing
    search_fields: Tuple[str, ...]
    # Tried in order after the linked account's name
    name_resolvers: Tuple[NameResolver, ...]
    # Row has user_id -> users.id
    links_user: bool = False


REGISTRY: Dict[str, RecycleEntry] = {
    # Login accounts only. Student, parent, teacher and admin profiles are separate
    # types; deleting an account does not list its profile under "user".
    RecycleType.USER.value: RecycleEntry(
        key="user",
        model=User,
        search_fields=("name", "email", "user_code", "phone"),
        name_resolvers=(_field("name"), _field("email"), _field("user_code")),
    ),
    RecycleType.ADMIN.value: RecycleEntry(
        key="admin",
        model=AdminProfile,
        search_fields=("designation", "department"),
        name_resolvers=(_field("designation"),),
        links_user=True,
    ),
    RecycleType.STUDENT.value: RecycleEntry(
        key="student",
        model=Student,
        search_fields=("admission_number", "roll_number", "academic_year"),
        name_resolvers=(_field("admission_number"), _field("roll_number")),
        links_user=True,
    ),
    RecycleType.PARENT.value: RecycleEntry(
        key="parent",
        model=Parent,
        search_fields=("father_name", "mother_name", "father_phone", "mother_phone"),
        name_resolvers=(_field("father_name"), _field("mother_name")),
        links_user=True,
    ),
    RecycleType.TEACHER.value: RecycleEntry(
        key="teacher",
        model=TeacherProfile,
        search_fields=("name", "employee_id", "designation", "department"),
        name_resolvers=(_field("name"), _field("employee_id")),
        links_user=True,
    ),
    RecycleType.CLASS.value: RecycleEntry(
        key="class",
        model=SchoolClass,
        search_fields=("name", "section"),
        name_resolvers=(_template("{} {}", "name", "section"), _field("name")),
    ),
    RecycleType.SUBJECT.value: RecycleEntry(
        key="subject",
        model=Subject,
        search_fields=("name", "code"),
        name_resolvers=(_field("name"), _field("code")),
    ),
    RecycleType.ATTENDANCE.value: RecycleEntry(
        key="attendance",
        model=Attendance,
        search_fields=("status", "remarks"),
        name_resolvers=(_template("Attendance {}", "date"), _field("status")),
    ),
    RecycleType.EXAM.value: RecycleEntry(
        key="exam",
        model=Exam,
        search_fields=("name", "status"),
        name_resolvers=(_field("name"),),
    ),
    RecycleType.MARK.value: RecycleEntry(
        key="mark",
        model=Mark,
        search_fields=("grade", "remarks"),
        name_resolvers=(
            _template("{} ({}/{})", "grade", "marks_obtained", "max_marks"),
            _template("{}/{}", "marks_obtained", "max_marks"),
        ),
    ),
    RecycleType.TIMETABLE.value: RecycleEntry(
        key="timetable",
        model=Timetable,
        search_fields=("day", "room", "start_time"),
        name_resolvers=(_template("{} {}-{}", "day", "start_time", "end_time"),),
    ),
    RecycleType.FEE.value: RecycleEntry(
        key="fee",
        model=Fee,
        search_fields=("status", "notes"),
        name_resolvers=(_template("Fee {} ({})", "total_amount", "status"),),
    ),
    RecycleType.NOTIFICATION.value: RecycleEntry(
        key="notification",
        model=Notification,
        search_fields=("title", "message"),
        name_resolvers=(_field("title"),),
    ),
    RecycleType.FEEDBACK.value: RecycleEntry(
        key="feedback",
        model=Feedback,
        search_fields=("title", "message"),
        name_resolvers=(_field("title"),),
    ),
}


def normalize_type(type_key: Optional[str]) -> str:
    return str(type_key or "").strip().lower()


def get_entry(type_key: Optional[str]) -> RecycleEntry:
    """Resolve a type string to its registry entry or raise InvalidTypeError."""
    key = normalize_type(type_key)
    entry = REGISTRY.get(key)
    if entry is None:
        raise InvalidTypeError(key)
    return entry


def parse_item_id(raw: Any) -> UUID:
    """Ids that are not UUIDs cannot exist in storage, so they are NotFound."""
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw).strip())
    except (ValueError, AttributeError):
        raise NotFoundError(f"Item '{raw}' not found")


def resolve_name(entry: RecycleEntry, row: Any, user: Optional[User] = None) -> str:
    """Display name: linked account name first, then the type's own fields, then 'Unknown'."""
    candidates = []
    if entry.links_user and user is not None:
        candidates.append(user.name)
    candidates.extend(resolver(row) for resolver in entry.name_resolvers)
    for candidate in candidates:
        if candidate and str(candidate).strip():
            return str(candidate).strip()
    return UNKNOWN_NAME
