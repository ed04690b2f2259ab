"""Pytest configuration for tests directory."""
import base64
import os
import sys
from pathlib import Path

# Test settings must be in the environment before app.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("REPORT_VERIFICATION_DELAY_SECONDS", "0")
os.environ.setdefault("COLLECTION_VERIFICATION_DELAY_SECONDS", "0")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CONFIG_FILE", str(Path(__file__).parent / "no-config.yaml"))

backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import random
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.domain.collection.services import CollectionService
from app.domain.collection.verification import CollectionVerifier
from app.domain.reports.services import ReportService
from app.domain.rewards.services import RewardService
from app.domain.users.services import UserService
from app.infra.db.base import Base
from app.infra.db import models  # noqa: F401  (registers tables on Base)
from app.infra.db.repositories.collected_waste_repo import CollectedWasteRepository
from app.infra.db.repositories.report_repo import ReportRepository
from app.infra.db.repositories.reward_repo import RewardRepositoryImpl
from app.infra.db.repositories.transaction_repo import TransactionRepository
from app.infra.db.repositories.user_repo import UserRepositoryImpl
from app.infra.messaging.event_bus import EventBus
from app.settings import get_config_store


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that need real services (deselect with '-m \"not integration\"')"
    )


def image_data_url(size: int = 32, mime: str = "image/png") -> str:
    """A small fake image as a data URL."""
    payload = b"\x89PNG\r\n\x1a\n" + b"0" * max(size - 8, 0)
    return f"data:{mime};base64,{base64.b64encode(payload).decode()}"


@pytest.fixture
def png():
    return image_data_url()


@pytest.fixture
def make_image():
    return image_data_url


@pytest.fixture
def override_settings():
    """Apply runtime setting overrides for one test."""
    store = get_config_store()

    def apply(**values):
        store.update(values)

    yield apply
    store.clear_overrides()


# Test database setup
@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def events():
    """Event bus that records everything published on it."""
    bus = EventBus()
    bus.published = []

    async def record(event):
        bus.published.append(event)

    bus.subscribe(None, record)
    return bus


@pytest.fixture
def services(db_session, events):
    """Services wired the way api.deps wires them, on one session."""
    rewards = RewardService(RewardRepositoryImpl(db_session), TransactionRepository(db_session), db_session, events)
    return SimpleNamespace(
        users=UserService(UserRepositoryImpl(db_session), db_session),
        rewards=rewards,
        reports=ReportService(ReportRepository(db_session), rewards, db_session, events),
        collection=CollectionService(
            ReportRepository(db_session),
            CollectedWasteRepository(db_session),
            rewards,
            db_session,
            events,
            verifier=CollectionVerifier(delay_seconds=0, rng=random.Random(7)),
        ),
    )


@pytest.fixture
def make_user(services):
    counter = {"n": 0}

    async def create(name: str = "Test User", email: str = None):
        counter["n"] += 1
        return await services.users.create_user(email or f"user{counter['n']}@trashtrack.io", name)

    return create


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app with get_db bound to the test database."""
    from app.api.deps import get_db
    from app.main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Log in through the API and return auth headers plus the user payload."""

    async def do_login(email: str, name: str = None):
        body = {"email": email}
        if name is not None:
            body["name"] = name
        response = await client.post("/v1/auth/login", json=body)
        assert response.status_code == 200, response.text
        data = response.json()
        return SimpleNamespace(
            headers={"Authorization": f"Bearer {data['access_token']}"},
            user=data["user"],
            tokens=data,
        )

    return do_login
