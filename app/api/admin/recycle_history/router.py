from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.dependencies import no_store
from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.core.paging import parse_int
from app.db.session import get_db

from .schemas import HistoryListResponse
from . import service

router = APIRouter(prefix="/api/admin/recycle-history", tags=["recycle-history"])


@router.get(
    "",
    response_model=HistoryListResponse,
    dependencies=[Depends(no_store)],
)
async def get_recycle_history(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="Entity type, or 'history' for all types"),
    item_id: Optional[str] = Query(None, alias="itemId"),
    action: Optional[str] = Query(None, description="deleted, restored, permanently_deleted (comma separated)"),
    search: str = Query(""),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    sort_by: Optional[str] = Query("timestamp_desc", alias="sortBy"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        result = await service.list_history(
            db,
            page=parse_int(page),
            limit=parse_int(limit),
            type_key=type,
            item_id=item_id,
            action=action,
            search=search,
            from_date=from_date,
            to_date=to_date,
            sort_by=sort_by,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return HistoryListResponse(
        message=f"Retrieved {len(result.items)} history record(s)",
        data=result.items,
        pagination=result.pagination,
    )
