"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["REDIS_URL"] = ""

import fnmatch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from todo_api.cache import CacheService, get_cache  # noqa: E402
from todo_api.database import Base, get_db  # noqa: E402
from todo_api.models.todo import Todo  # noqa: E402, F401
from todo_api.models.user import User  # noqa: E402, F401
from todo_api.services.auth import AuthService  # noqa: E402


class FakeRedis:
    """Dict-backed stand-in for the handful of redis-py calls CacheService makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def scan_iter(self, match: str = "*", count: int | None = None):
        return iter([k for k in list(self.store) if fnmatch.fnmatchcase(k, match)])

    def exists(self, key: str) -> int:
        return 1 if key in self.store else 0

    def close(self) -> None:
        pass


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from main import app
    from todo_api.rate_limit import limiter

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    limiter.reset()
    app.dependency_overrides.clear()


@pytest.fixture(name="fake_redis")
def fake_redis_fixture() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(name="cache")
def cache_fixture(client: TestClient, fake_redis: FakeRedis) -> CacheService:
    """Route the app's cache dependency to a connected, in-memory cache."""
    from main import app

    cache = CacheService(url="redis://fake:6379/0")
    cache.client = fake_redis
    cache.is_connected = True
    app.dependency_overrides[get_cache] = lambda: cache
    return cache


def _make_user(db_session: Session, name: str, email: str, password: str = "password123") -> dict:
    result = AuthService().signup(db_session, name, email, password)
    return {
        "user_id": result.user.id,
        "name": result.user.name,
        "email": result.user.email,
        "password": password,
        "token": result.access_token,
        "refresh_token": result.refresh_token,
        "headers": {"Authorization": f"Bearer {result.access_token}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session) -> dict:
    """Create a test user and return its ids, credentials, and tokens."""
    return _make_user(db_session, "Test User", "test@example.com")


@pytest.fixture(name="other_user")
def other_user_fixture(db_session: Session) -> dict:
    """A second, unrelated user for isolation tests."""
    return _make_user(db_session, "Other User", "other@example.com")
