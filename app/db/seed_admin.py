"""
Seed script to create the first school admin account.

Run once (after init_db) with env set:
  SEED_ADMIN_EMAIL=admin@school.example
  SEED_ADMIN_PASSWORD=YourSecurePassword
  SEED_ADMIN_NAME="School Admin"   (optional)

Creates (or resets the password / role of) one active user with role admin
and a matching admin profile.
"""
import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import hash_password
from app.core.config import settings
from app.core.enums import UserRole
from app.core.models import AdminProfile
from app.db.session import AsyncSessionLocal
from app.db.soft_delete import count, find_one


async def next_admin_code(db: AsyncSession) -> str:
    """ADM-0001, ADM-0002, ... counting deleted accounts too so codes are never reused."""
    existing = await count(db, User, {"role": UserRole.ADMIN.value}, include_deleted=True)
    return f"ADM-{existing + 1:04d}"


async def seed_admin(
    db: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: Optional[str] = None,
) -> Optional[User]:
    email = (email or settings.seed_admin_email or "").strip().lower()
    password = password or settings.seed_admin_password
    name = name or settings.seed_admin_name
    if not email or not password:
        print("No SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD; skipping admin user.")
        return None

    user = await find_one(db, User, {"email": email})
    if user is None:
        user = User(
            user_code=await next_admin_code(db),
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
            status="active",
        )
        db.add(user)
        await db.flush()
        db.add(AdminProfile(user_id=user.id, designation="Administrator"))
        print("Created admin user:", email, user.user_code)
    else:
        user.role = UserRole.ADMIN.value
        user.status = "active"
        user.password_hash = hash_password(password)
        user.name = name
        print("Updated existing user to admin:", email)

    await db.commit()
    return user


async def main() -> None:
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
