from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.core.schemas import ActorInfo, CamelModel, ItemFailure, Pagination


class RecycleBinItem(CamelModel):
    """Normalised view of one soft-deleted row."""

    item_id: str
    type: str
    name: str
    email: Optional[str] = None
    deleted_at: Optional[datetime] = None
    deleted_by: ActorInfo
    snapshot: Dict[str, Any]


class RecycleBinPage(CamelModel):
    items: List[RecycleBinItem]
    pagination: Pagination


class RecycleBinListResponse(CamelModel):
    success: bool = True
    message: str
    data: List[RecycleBinItem]
    pagination: Pagination


class RecycleActionRequest(CamelModel):
    type: str = Field(..., min_length=1)
    ids: List[str] = Field(..., min_length=1)


class BatchResult(CamelModel):
    """Outcome of a restore or hard-delete batch. One bad id never fails the rest."""

    requested: int
    succeeded: List[str] = Field(default_factory=list)
    failures: List[ItemFailure] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)


class RestoreResponse(CamelModel):
    success: bool = True
    requested: int
    restored_count: int
    failed: int
    failures: List[ItemFailure]
    message: str


class HardDeleteResponse(CamelModel):
    success: bool = True
    requested: int
    deleted_count: int
    failed: int
    failures: List[ItemFailure]
    message: str
