from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from app.core.schemas import ActorInfo, CamelModel, Pagination


class HistoryItem(CamelModel):
    id: UUID
    item_id: str
    type: str
    action: str
    timestamp: datetime
    performed_by: ActorInfo
    snapshot: Optional[Dict[str, Any]] = None


class HistoryPage(CamelModel):
    items: List[HistoryItem]
    pagination: Pagination


class HistoryListResponse(CamelModel):
    success: bool = True
    message: str
    data: List[HistoryItem]
    pagination: Pagination
