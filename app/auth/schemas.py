from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.core.schemas import CamelModel


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserInfo(CamelModel):
    id: UUID
    name: str
    email: str
    role: str


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
    issued_at: datetime


class CurrentUser(BaseModel):
    """Authenticated actor; copied into deleted_by / performed_by on every recycle action."""

    id: UUID
    name: str
    email: str
    role: str
