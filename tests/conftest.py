"""
Test configuration and fixtures for GameWallet

Every test gets its own in-memory SQLite database (aiosqlite, StaticPool so
all sessions share one connection), a scripted randomizer and a controllable
clock wired into a GamingService.

Usage:
    pytest tests/
    pytest tests/unit
    pytest -m integration
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gamewallet.api.deps import get_gaming_service
from gamewallet.core.auth import create_access_token
from gamewallet.db.base import Base
from gamewallet.main import create_app
from gamewallet.services.gaming import GamingService
from gamewallet.services.rates import StaticRates
import gamewallet.models  # noqa: F401 registers every table
from tests.fixtures.clock import MutableClock
from tests.fixtures.randomizer import ScriptedRandomizer

TEST_RATES = {"BTC": Decimal("40000"), "ETH": Decimal("2000"), "VEST": Decimal("1")}


@pytest.fixture
async def db_engine():
    """
    Create a fresh in-memory database with every table.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def randomizer() -> ScriptedRandomizer:
    return ScriptedRandomizer()


@pytest.fixture
def service(session_factory, randomizer, clock) -> GamingService:
    return GamingService(
        session_factory=session_factory,
        randomizer=randomizer,
        clock=clock,
        rates=StaticRates(TEST_RATES),
    )


@pytest.fixture
def test_app(service) -> FastAPI:
    """
    Application with the service dependency pointed at the test database.
    """
    app = create_app()
    app.dependency_overrides[get_gaming_service] = lambda: service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id; role="admin" for operator routes."""
    def make(user_id: str, role: Optional[str] = None) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}
    return make


# Markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
