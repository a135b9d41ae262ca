"""
Soft-delete convention shared by every deletable model.

Rows are never hidden by a global hook. Reads go through ``with_active_only``
(or the ``find`` helpers built on it), which adds ``is_deleted IS NOT true``
unless the caller opts out with ``include_deleted=True`` or constrains
``is_deleted`` itself.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import Boolean, Column, DateTime, Index, String, func, select, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import declared_attr

IS_DELETED = "is_deleted"

# Fields cleared by restore and set by soft delete.
SOFT_DELETE_FIELDS = ("is_deleted", "deleted_at", "deleted_by_id", "deleted_by_name", "deleted_by_role")

# Values written by restore: the row is active again and carries no deletion actor.
ACTIVE_VALUES = {field: (False if field == IS_DELETED else None) for field in SOFT_DELETE_FIELDS}


class SoftDeleteMixin:
    """Adds is_deleted / deleted_at / deleted_by to a model. is_deleted is true iff deleted_at is set."""

    @declared_attr
    def is_deleted(cls):
        return Column(Boolean, nullable=False, default=False, server_default=text("false"), index=True)

    @declared_attr
    def deleted_at(cls):
        return Column(DateTime(timezone=True), nullable=True)

    # Actor is denormalised: the account may be renamed or removed later.
    @declared_attr
    def deleted_by_id(cls):
        return Column(UUID(as_uuid=True), nullable=True)

    @declared_attr
    def deleted_by_name(cls):
        return Column(String(255), nullable=True)

    @declared_attr
    def deleted_by_role(cls):
        return Column(String(50), nullable=True)


def active_unique_index(name: str, *columns: str) -> Index:
    """Unique index over active rows only, so soft-deleted rows may share the key."""
    return Index(
        name,
        *columns,
        unique=True,
        postgresql_where=text("is_deleted = false"),
        sqlite_where=text("is_deleted = 0"),
        info={"active_only": True},
    )


def active_unique_keys(model) -> List[Sequence[str]]:
    """Column-name tuples of every active-only unique index declared on the model's table."""
    keys: List[Sequence[str]] = []
    for index in model.__table__.indexes:
        if index.unique and index.info.get("active_only"):
            keys.append(tuple(col.name for col in index.columns))
    return sorted(keys)


def with_active_only(filters: Optional[Dict[str, Any]] = None, *, include_deleted: bool = False) -> Dict[str, Any]:
    """
    Return a copy of ``filters`` that excludes soft-deleted rows.

    - include_deleted=True: filters are returned untouched.
    - filters already constrain is_deleted: the caller's value wins.
    - otherwise is_deleted=False is added (rendered as IS NOT true).
    """
    criteria = dict(filters or {})
    if include_deleted or IS_DELETED in criteria:
        return criteria
    criteria[IS_DELETED] = False
    return criteria


def build_where(model, criteria: Dict[str, Any]) -> List[Any]:
    """Translate a filter dict into SQLAlchemy clauses on ``model``."""
    clauses = []
    for field, value in criteria.items():
        col = getattr(model, field, None)
        if col is None:
            raise ValueError(f"{model.__name__} has no column '{field}'")
        if field == IS_DELETED:
            # NULL counts as active
            clauses.append(col.is_(True) if value else col.is_not(True))
        elif value is None:
            clauses.append(col.is_(None))
        elif isinstance(value, (list, tuple, set, frozenset)):
            clauses.append(col.in_(list(value)))
        else:
            clauses.append(col == value)
    return clauses


def select_active(model, filters: Optional[Dict[str, Any]] = None, *, include_deleted: bool = False):
    """SELECT for ``model`` with the soft-delete visibility filter applied."""
    criteria = with_active_only(filters, include_deleted=include_deleted)
    return select(model).where(*build_where(model, criteria))


async def find(
    db: AsyncSession,
    model,
    filters: Optional[Dict[str, Any]] = None,
    *,
    include_deleted: bool = False,
    order_by: Optional[Iterable[Any]] = None,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Any]:
    stmt = select_active(model, filters, include_deleted=include_deleted)
    if order_by is not None:
        stmt = stmt.order_by(*order_by)
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return list(result.scalars().all())


async def find_one(
    db: AsyncSession,
    model,
    filters: Optional[Dict[str, Any]] = None,
    *,
    include_deleted: bool = False,
) -> Optional[Any]:
    stmt = select_active(model, filters, include_deleted=include_deleted).limit(1)
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return result.scalars().first()


async def count(
    db: AsyncSession,
    model,
    filters: Optional[Dict[str, Any]] = None,
    *,
    include_deleted: bool = False,
) -> int:
    stmt = select_active(model, filters, include_deleted=include_deleted)
    result = await db.execute(select(func.count()).select_from(stmt.subquery()))
    return result.scalar() or 0


def is_consistent(row) -> bool:
    """is_deleted and deleted_at agree (both set or both clear)."""
    return bool(row.is_deleted) == (row.deleted_at is not None)


def utcnow() -> datetime:
    return datetime.utcnow()
