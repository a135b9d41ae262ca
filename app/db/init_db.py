"""
Create every table (and the partial unique indexes) that does not exist yet.

  python -m app.db.init_db
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

import app.core.models  # noqa: F401  registers every model on Base.metadata
from app.auth.models import User  # noqa: F401
from app.db.session import Base, engine


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    await create_tables(engine)
    print("Tables:", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
