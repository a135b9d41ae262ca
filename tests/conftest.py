import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from datetime import date, datetime
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.models import User
from app.auth.schemas import CurrentUser
from app.auth.security import create_access_token, hash_password, token_subject_for
from app.core.models import Parent, SchoolClass, Student, Subject
from app.db.session import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"
ADMIN_PASSWORD = "AdminPass123"


@pytest.fixture()
async def engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and asserting. Requests get their own session."""
    async with session_factory() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            async with session_factory() as request_session:
                yield request_session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def admin_user(db_session: AsyncSession) -> User:
    user = User(
        user_code="ADM-0001",
        name="Asha Admin",
        email="asha.admin@school.edu",
        password_hash=hash_password(ADMIN_PASSWORD),
        role="admin",
        status="active",
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture()
def admin_actor(admin_user: User) -> CurrentUser:
    return CurrentUser(id=admin_user.id, name=admin_user.name, email=admin_user.email, role=admin_user.role)


@pytest.fixture()
def auth_headers(admin_user: User) -> dict:
    token = create_access_token(subject=token_subject_for(admin_user))
    return {"Authorization": f"Bearer {token}"}


class Factory:
    """Creates committed rows; ``deleted=True`` stores them already in the recycle bin."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def save(self, obj, *, deleted: bool = False, deleted_at: Optional[datetime] = None, actor: Optional[CurrentUser] = None):
        if deleted:
            obj.is_deleted = True
            obj.deleted_at = deleted_at or datetime.utcnow()
            if actor is not None:
                obj.deleted_by_id = actor.id
                obj.deleted_by_name = actor.name
                obj.deleted_by_role = actor.role
        self.db.add(obj)
        await self.db.commit()
        return obj

    async def user(self, name: Optional[str] = None, *, role: str = "student", email: Optional[str] = None, user_code: Optional[str] = None, **kwargs):
        n = self._next()
        user = User(
            user_code=user_code or f"USR-{n:04d}",
            name=name or f"User {n}",
            email=email or f"user{n}@school.edu",
            password_hash=hash_password("Secret123"),
            role=role,
        )
        return await self.save(user, **kwargs)

    async def school_class(self, name: str = "Grade 5", section: str = "A", **kwargs):
        return await self.save(SchoolClass(name=name, section=section), **kwargs)

    async def subject(self, name: str = "Mathematics", code: Optional[str] = None, **kwargs):
        return await self.save(Subject(name=name, code=code or f"SUB-{self._next()}"), **kwargs)

    async def parent(self, user: Optional[User] = None, *, father_name: str = "Ravi Kumar", mother_name: str = "Meena Kumar", **kwargs):
        return await self.save(
            Parent(user_id=user.id if user else None, father_name=father_name, mother_name=mother_name),
            **kwargs,
        )

    async def student(
        self,
        user: Optional[User] = None,
        *,
        parent: Optional[Parent] = None,
        school_class: Optional[SchoolClass] = None,
        admission_number: Optional[str] = None,
        **kwargs,
    ):
        n = self._next()
        student = Student(
            user_id=user.id if user else None,
            parent_id=parent.id if parent else None,
            class_id=school_class.id if school_class else None,
            admission_number=admission_number or f"ADM-2024-{n:04d}",
            roll_number=str(n),
            academic_year="2024-2025",
            dob=date(2012, 1, 1),
        )
        return await self.save(student, **kwargs)


@pytest.fixture()
def factory(db_session: AsyncSession) -> Factory:
    return Factory(db_session)


@pytest.fixture()
def admin_password() -> str:
    return ADMIN_PASSWORD
