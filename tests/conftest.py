import os

# Settings are read at import time, so the environment has to be in place first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("HOST", "localhost")
os.environ.setdefault("DB_USERNAME", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("DATABASE", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("STREAM_API_KEY", "stream-key")
os.environ.setdefault("STREAM_API_SECRET", "stream-secret")
os.environ.setdefault("FRIENDSHIP_MAX_ATTEMPTS", "5")
os.environ.setdefault("FRIENDSHIP_RETRY_MAX_WAIT", "0.05")

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.friendship import RelationshipSnapshot, RelationshipStore
from app.database import Base
from app.models import User


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'friends.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    async def _make(uid, email=None, **fields):
        async with session_factory() as session:
            session.add(User(id=uid, email=email, display_name=uid.title(), **fields))
            await session.commit()
    return _make


@pytest_asyncio.fixture
async def users(make_user):
    """alice, bob and carol exist, with no relationship fields yet."""
    for uid in ("alice", "bob", "carol"):
        await make_user(uid, f"{uid}@example.com")
    return ("alice", "bob", "carol")


@pytest.fixture
def snapshot(session_factory):
    async def _load(uid) -> RelationshipSnapshot:
        async with session_factory() as session:
            snap, _ = await RelationshipStore(session).read_pair(uid, uid)
            return snap
    return _load


@pytest.fixture
def assert_consistent(session_factory):
    """Check the cross-record invariants over every stored user."""
    async def _check():
        async with session_factory() as session:
            rows = (await session.execute(select(User))).scalars().all()
            store = RelationshipStore(session)
            snaps = {}
            for row in rows:
                snaps[row.id], _ = await store.read_pair(row.id, row.id)

        for uid, snap in snaps.items():
            assert uid not in snap.friends | snap.requests_sent | snap.requests_received
            for other in snap.friends:
                assert uid in snaps[other].friends
                assert other not in snap.requests_sent | snap.requests_received
            for other in snap.requests_sent:
                assert uid in snaps[other].requests_received
                assert other not in snap.requests_received
            for other in snap.requests_received:
                assert uid in snaps[other].requests_sent
    return _check
