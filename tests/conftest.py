import os
from collections.abc import AsyncGenerator
from typing import Any

os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("REDIS_URL", "memory://")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from thesync import task_queue  # noqa: E402
from thesync.auth.models import Admin, Lecturer, Student, User  # noqa: E402
from thesync.auth.utils import hash_password  # noqa: E402
from thesync.config import get_settings  # noqa: E402
from thesync.database import get_db  # noqa: E402
from thesync.main import create_app  # noqa: E402
from thesync.rate_limit import limiter  # noqa: E402
from thesync.redis_client import get_redis  # noqa: E402
from thesync_shared.database.postgres import Base  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"

ADMIN_PASSWORD = "Secret123!@#"
USER_PASSWORD = "Password1234!"

limiter.enabled = False


class FakeRedis:
    """In-memory stand-in for the get/set/delete subset of redis.asyncio.Redis.

    Expiry runs on a manual clock so TTL behaviour can be tested with advance().
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _purge(self, key: str) -> None:
        expires_at = self._expires_at.get(key)
        if expires_at is not None and expires_at <= self.now:
            self._data.pop(key, None)
            self._expires_at.pop(key, None)

    async def get(self, key: str) -> str | None:
        self._purge(key)
        return self._data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._data[key] = value
        if ex is None:
            self._expires_at.pop(key, None)
        else:
            self._expires_at[key] = self.now + ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._purge(key)
            if self._data.pop(key, None) is not None:
                removed += 1
            self._expires_at.pop(key, None)
        return removed

    def ttl(self, key: str) -> float | None:
        self._purge(key)
        if key not in self._data or key not in self._expires_at:
            return None
        return self._expires_at[key] - self.now

    def keys(self) -> list[str]:
        for key in list(self._data):
            self._purge(key)
        return list(self._data)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(autouse=True)
def email_jobs(monkeypatch) -> list[tuple[str, tuple[Any, ...]]]:
    """Record every job enqueued through task_queue instead of touching Redis."""
    jobs: list[tuple[str, tuple[Any, ...]]] = []

    async def _enqueue(function_name: str, *args: Any, **kwargs: Any) -> str:
        jobs.append((function_name, args))
        return f"job-{len(jobs)}"

    monkeypatch.setattr(task_queue, "enqueue", _enqueue)
    return jobs


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.commit()


class Seeder:
    """Insert principals through their own committed session."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = factory

    async def admin(self, username: str = "admin", password: str = ADMIN_PASSWORD) -> Admin:
        async with self._factory() as session:
            admin = Admin(username=username, password_hash=hash_password(password))
            session.add(admin)
            await session.commit()
            return admin

    async def user(
        self,
        email: str,
        *,
        password: str = USER_PASSWORD,
        lecturer: bool = False,
        moderator: bool = False,
        student_code: str | None = None,
        is_active: bool = True,
    ) -> User:
        async with self._factory() as session:
            user = User(
                email=email,
                full_name=email.split("@")[0].title(),
                password_hash=hash_password(password),
                is_active=is_active,
                lecturer=Lecturer(is_moderator=moderator) if lecturer or moderator else None,
                student=Student(student_code=student_code) if student_code else None,
            )
            session.add(user)
            await session.commit()
            return user


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def app(session_factory, fake_redis):
    app = create_app()

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
