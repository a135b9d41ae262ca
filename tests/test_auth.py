import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.admin.records.service import soft_delete_item
from app.db.seed_admin import seed_admin
from app.db.soft_delete import find_one
from app.auth.models import User
from app.auth.security import create_access_token, decode_access_token, token_subject_for
from app.core.models import AdminProfile


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin_user, admin_password) -> None:
    response = await client.post(
        "/api/auth/login",
        json={"email": admin_user.email, "password": admin_password},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["accessToken"]
    assert data["user"]["role"] == "admin"

    # Token works against an admin endpoint
    listing = await client.get(
        "/api/admin/recycle-bin",
        params={"type": "user"},
        headers={"Authorization": f"Bearer {data['accessToken']}"},
    )
    assert listing.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, admin_user) -> None:
    response = await client.post(
        "/api/auth/login",
        json={"email": admin_user.email, "password": "nope"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_soft_deleted_account_cannot_login(
    client: AsyncClient, db_session: AsyncSession, factory, admin_actor
) -> None:
    user = await factory.user("Gone User", role="teacher", email="gone@school.edu")
    await soft_delete_item(db_session, "user", user.id, admin_actor)

    response = await client.post(
        "/api/auth/login",
        json={"email": "gone@school.edu", "password": "Secret123"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_of_soft_deleted_admin_is_rejected(
    client: AsyncClient, db_session: AsyncSession, admin_user, admin_actor, auth_headers
) -> None:
    await soft_delete_item(db_session, "user", admin_user.id, admin_actor)

    response = await client.get("/api/admin/recycle-history", headers=auth_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_seed_admin_creates_and_updates(db_session: AsyncSession) -> None:
    created = await seed_admin(db_session, email="Head@School.edu", password="Pass1234", name="Head Admin")
    assert created.email == "head@school.edu"
    assert created.user_code == "ADM-0001"
    profile = await find_one(db_session, AdminProfile, {"user_id": created.id})
    assert profile is not None

    await seed_admin(db_session, email="head@school.edu", password="Other5678", name="Head Admin")
    user = await find_one(db_session, User, {"email": "head@school.edu"})
    assert user.id == created.id


@pytest.mark.asyncio
async def test_access_token_round_trip(admin_user) -> None:
    token = create_access_token(subject=token_subject_for(admin_user))
    assert decode_access_token(token) == admin_user.id

    expired = create_access_token(subject=token_subject_for(admin_user), expires_minutes=-1)
    assert decode_access_token(expired) is None
    assert decode_access_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_oauth_form_login(client: AsyncClient, admin_user, admin_password) -> None:
    response = await client.post(
        "/api/auth/login-oauth",
        data={"username": admin_user.email, "password": admin_password},
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"

    bad = await client.post("/api/auth/login-oauth", data={"username": "nobody", "password": "x"})
    assert bad.status_code == 401
