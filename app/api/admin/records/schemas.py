from datetime import datetime
from typing import Any, Dict, Optional

from app.core.schemas import ActorInfo, CamelModel


class RecordResponse(CamelModel):
    item_id: str
    type: str
    name: str
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[ActorInfo] = None
    data: Dict[str, Any]
