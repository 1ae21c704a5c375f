from .database import AsyncSessionLocal, Base, engine

async def get_db():
    async with AsyncSessionLocal() as db:
        yield db

async def create_tables():
    """Create missing tables. Used for local development databases only."""
    from . import models  # noqa: F401  registers the mappers on Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
