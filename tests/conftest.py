"""Test fixtures for Taskiq, the async runtime, and a throwaway database."""

import itertools
import os
import sys
from collections.abc import AsyncIterator, Awaitable, Callable
from decimal import Decimal
from pathlib import Path

os.environ["TASKIQ_TESTING"] = "1"

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.session import build_engine
from src.models import Base, Post, User
from src.taskiq_app.broker import broker
from src.taskiq_app.dedup import _MEMORY_LOCKS

PostFactory = Callable[..., Awaitable[Post]]
UserFactory = Callable[..., Awaitable[User]]

_EMAIL_SEQ = itertools.count(1)


@pytest.fixture(scope="function", autouse=True)
async def init_taskiq() -> AsyncIterator[None]:
    """Initialize broker per test when using InMemoryBroker."""

    _MEMORY_LOCKS.clear()
    await broker.startup()
    yield
    await broker.shutdown()
    _MEMORY_LOCKS.clear()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_sessionmaker() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """In-memory SQLite schema with foreign keys enforced."""

    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(
    db_sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with db_sessionmaker() as session:
        yield session


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    async def _make(user_id: int | None = None, name: str = "Yasmine") -> User:
        user = User(name=name, email=f"{name.lower()}-{next(_EMAIL_SEQ)}@example.ma")
        if user_id is not None:
            user.id = user_id
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_post(db_session: AsyncSession) -> PostFactory:
    async def _make(owner: User, post_id: int | None = None, **overrides: object) -> Post:
        values: dict[str, object] = {
            "city": "casablanca",
            "sector": "Maarif",
            "price": Decimal("1250000.00"),
            "product": "vente",
            "type": "appartement",
            "bedrooms": 2,
            "bathrooms": 1,
            "area": Decimal("95.50"),
            "address": "12 Rue Ibnou Mounir",
            "address_maps": "33.5831,-7.6323",
            "title": "Appartement lumineux",
            "description": "Proche tramway.",
        }
        values.update(overrides)
        post = Post(user_id=owner.id, **values)
        if post_id is not None:
            post.id = post_id
        db_session.add(post)
        await db_session.commit()
        await db_session.refresh(post)
        return post

    return _make
