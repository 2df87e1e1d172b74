from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from stepplan.core.config import settings
from stepplan.db.base import Base
from stepplan.db import models  # noqa: F401

default_engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True)
SessionLocal = async_sessionmaker(default_engine, expire_on_commit=False)

async def init_db(engine: Optional[AsyncEngine] = None):
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
