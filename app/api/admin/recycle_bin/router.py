from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.dependencies import no_store
from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.core.paging import parse_int
from app.db.session import get_db

from .schemas import HardDeleteResponse, RecycleActionRequest, RecycleBinListResponse, RestoreResponse
from . import service

router = APIRouter(prefix="/api/admin/recycle-bin", tags=["recycle-bin"])


@router.get(
    "",
    response_model=RecycleBinListResponse,
    dependencies=[Depends(no_store)],
)
async def list_deleted_items(
    type: str = Query(..., description="user, admin, student, parent, teacher, class, subject, attendance, exam, mark, timetable, fee, notification, feedback"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: str = Query(""),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    sort_by: Optional[str] = Query("deletedAt_desc", alias="sortBy"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """List soft-deleted rows of one type. page/limit outside range or not numeric are clamped (limit max 100)."""
    try:
        result = await service.list_deleted_items(
            db,
            type,
            page=parse_int(page),
            limit=parse_int(limit),
            search=search,
            from_date=from_date,
            to_date=to_date,
            sort_by=sort_by,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return RecycleBinListResponse(
        message=f"Retrieved {len(result.items)} deleted {type.strip().lower()} item(s)",
        data=result.items,
        pagination=result.pagination,
    )


@router.post(
    "/restore",
    response_model=RestoreResponse,
    dependencies=[Depends(no_store)],
)
async def restore_items(
    payload: RecycleActionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        result = await service.restore_items(db, payload.type, payload.ids, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return RestoreResponse(
        requested=result.requested,
        restored_count=result.success_count,
        failed=len(result.failures),
        failures=result.failures,
        message=service.summarize(result, "Restored"),
    )


@router.delete(
    "/hard-delete",
    response_model=HardDeleteResponse,
    dependencies=[Depends(no_store)],
)
async def hard_delete_items(
    payload: RecycleActionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Permanently remove soft-deleted rows. Irreversible; the history snapshot is the last copy."""
    try:
        result = await service.hard_delete_items(db, payload.type, payload.ids, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return HardDeleteResponse(
        requested=result.requested,
        deleted_count=result.success_count,
        failed=len(result.failures),
        failures=result.failures,
        message=service.summarize(result, "Permanently deleted"),
    )
