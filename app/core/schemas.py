from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API bodies: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class ActorInfo(CamelModel):
    """Who performed an action, as captured at the time."""

    id: Optional[UUID] = None
    name: str = "System"
    email: str = "-"
    role: str = "-"


class ItemFailure(CamelModel):
    id: str
    reason: str
    message: str
