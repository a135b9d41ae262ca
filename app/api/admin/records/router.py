from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import RecordResponse
from . import service

router = APIRouter(prefix="/api/admin/records", tags=["records"])


@router.get(
    "/{type}/{item_id}",
    response_model=RecordResponse,
)
async def get_record(
    type: str,
    item_id: str,
    include_deleted: bool = Query(False, alias="includeDeleted"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        return await service.get_record(db, type, item_id, include_deleted=include_deleted)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{type}/{item_id}",
    response_model=RecordResponse,
)
async def soft_delete_record(
    type: str,
    item_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Soft delete: the row moves to the recycle bin and a 'deleted' history record is written."""
    try:
        return await service.soft_delete_item(db, type, item_id, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
