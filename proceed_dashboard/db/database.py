# === proceed_dashboard/db/database.py ===

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()

def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(database_url, echo=echo)

def create_session_factory(engine: AsyncEngine):
    return sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )

async def create_db_and_tables(engine: AsyncEngine):
    # register the tables on Base.metadata
    from proceed_dashboard.models import version  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
