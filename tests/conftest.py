from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from subtrack.database import get_db
from subtrack.dependencies import get_current_identity, get_store
from subtrack.main import app
from subtrack.models import Base
from subtrack.models.user import User
from subtrack.schemas.user import Identity

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakePipeline:
    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._ops: list[tuple] = []

    def zremrangebyscore(self, key: str, low: float, high: float):
        self._ops.append(("zremrangebyscore", key, low, high))

    def zadd(self, key: str, mapping: dict):
        self._ops.append(("zadd", key, mapping))

    def zcard(self, key: str):
        self._ops.append(("zcard", key))

    def expire(self, key: str, seconds: int):
        self._ops.append(("expire", key, seconds))

    async def execute(self) -> list:
        results = []
        for op, key, *args in self._ops:
            zset = self._redis._zsets.setdefault(key, {})
            if op == "zremrangebyscore":
                low, high = args
                stale = [m for m, score in zset.items() if low <= score <= high]
                for member in stale:
                    del zset[member]
                results.append(len(stale))
            elif op == "zadd":
                zset.update(args[0])
                results.append(len(args[0]))
            elif op == "zcard":
                results.append(len(zset))
            else:
                self._redis._ttls[key] = args[0]
                results.append(True)
        self._ops.clear()
        return results


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._zsets: dict[str, dict[str, float]] = {}
        self._ttls: dict[str, int] = {}

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class FakeStore:
    """In-memory stand-in for SubscriptionStore that records every call."""

    def __init__(self, users=(), subscriptions=()):
        self.users = {u.id: u for u in users}
        self.subscriptions = {s.id: s for s in subscriptions}
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None
        # Forced onto every row create/update hands back
        self.write_overrides: dict = {}
        self.committed = 0
        self.rolled_back = 0

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("create_subscription", "update_subscription")]

    async def find_user_by_id(self, user_id):
        self._record("find_user_by_id", user_id)
        return self.users.get(user_id)

    async def find_subscription_by_id(self, subscription_id):
        self._record("find_subscription_by_id", subscription_id)
        return self.subscriptions.get(subscription_id)

    async def list_subscriptions_by_user(self, user_id):
        self._record("list_subscriptions_by_user", user_id)
        rows = [s for s in self.subscriptions.values() if s.user_id == user_id]
        return sorted(rows, key=lambda s: (s.renewal_date is None, s.renewal_date or 0, s.id))

    async def create_subscription(self, fields):
        self._record("create_subscription", dict(fields))
        now = datetime.now(timezone.utc)
        row = SimpleNamespace(
            id=max(self.subscriptions, default=0) + 1,
            name=None, cost=None, cycle=None, renewal_date=None,
            user_id=None, is_active=True, category=None, notes=None, reminder=None,
            created_at=now, updated_at=now,
        )
        for key, value in fields.items():
            setattr(row, key, value)
        for key, value in self.write_overrides.items():
            setattr(row, key, value)
        self.subscriptions[row.id] = row
        return row

    async def update_subscription(self, subscription_id, fields):
        self._record("update_subscription", subscription_id, dict(fields))
        row = self.subscriptions[subscription_id]
        for key, value in fields.items():
            setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)
        for key, value in self.write_overrides.items():
            setattr(row, key, value)
        return row

    async def commit(self):
        self.committed += 1

    async def rollback(self):
        self.rolled_back += 1


def make_user(user_id: str, email: str, username: str) -> SimpleNamespace:
    return SimpleNamespace(
        id=user_id,
        email=email,
        username=username,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        email_notifications=True,
        timezone="UTC",
    )


def make_row(**overrides) -> SimpleNamespace:
    row = {
        "id": 1,
        "name": "Netflix",
        "cost": 9.99,
        "cycle": "monthly",
        "renewal_date": datetime(2025, 12, 1, tzinfo=timezone.utc),
        "created_at": datetime(2025, 11, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2025, 11, 1, tzinfo=timezone.utc),
        "user_id": "user-1",
        "is_active": True,
        "category": None,
        "notes": None,
        "reminder": None,
    }
    row.update(overrides)
    return SimpleNamespace(**row)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore(
        users=[
            make_user("user-1", "a@b.com", "user1"),
            make_user("user-2", "c@d.com", "user2"),
        ],
        subscriptions=[
            make_row(id=1),
            make_row(id=2, name="Gym", cost=40.0, user_id="user-2", category="fitness"),
        ],
    )


@pytest.fixture
def caller() -> Identity:
    return Identity(id="user-1", email="a@b.com")


@pytest.fixture
async def store_client(fake_store: FakeStore, caller: Identity) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose storage is the in-memory FakeStore."""
    app.dependency_overrides[get_store] = lambda: fake_store
    app.dependency_overrides[get_current_identity] = lambda: caller
    app.state.redis = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    user = User(
        id="user-1",
        email="test@example.com",
        username="tester",
        email_notifications=True,
        timezone="UTC",
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def second_user(db_session: AsyncSession) -> User:
    user = User(
        id="user-2",
        email="friend@example.com",
        username="friend",
        email_notifications=False,
        timezone="Europe/Berlin",
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _override_db(db_engine):
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override_get_db


@pytest.fixture
async def client(db_engine, test_user: User) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_current_identity():
        return Identity(id=test_user.id, email=test_user.email)

    app.dependency_overrides[get_db] = _override_db(db_engine)
    app.dependency_overrides[get_current_identity] = override_get_current_identity
    app.state.redis = FakeRedis()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Client that resolves identity from real bearer tokens."""
    app.dependency_overrides[get_db] = _override_db(db_engine)
    app.state.redis = FakeRedis()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
