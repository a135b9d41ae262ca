import logging
from datetime import datetime, timezone

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.schemas import LoginRequest, LoginResponse, UserInfo
from app.auth.security import create_access_token, token_subject_for, verify_password
from app.core.exceptions import ServiceError
from app.db.soft_delete import find_one

logger = logging.getLogger(__name__)


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    # Soft-deleted accounts cannot sign in
    user = await find_one(db, User, {"email": payload.email.lower()})
    if not user or not verify_password(payload.password, user.password_hash):
        raise ServiceError("Invalid email or password", status.HTTP_401_UNAUTHORIZED)
    if user.status != "active":
        raise ServiceError("Account is not active", status.HTTP_403_FORBIDDEN)

    token = create_access_token(subject=token_subject_for(user))
    logger.info("login user_id=%s role=%s", user.id, user.role)
    return LoginResponse(
        access_token=token,
        user=UserInfo(id=user.id, name=user.name, email=user.email, role=user.role),
        issued_at=datetime.now(timezone.utc),
    )
