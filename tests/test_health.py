"""
Test health and metrics endpoints
"""

import asyncio

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from gamewallet.api.deps import get_gaming_service
from gamewallet.api.health import health_check
from gamewallet.main import create_app
from gamewallet.services.gaming import GamingService

client = TestClient(create_app())


def test_health_endpoint():
    """Test that health endpoint returns 200 and correct response"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_endpoint_direct():
    """Test health endpoint directly"""
    result = asyncio.run(health_check())
    assert result == {"status": "ok"}


def test_metrics_endpoint():
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "bets_placed_total" in response.text


def test_readiness_with_database(tmp_path):
    app = create_app()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ready.db'}", poolclass=NullPool)
    service = GamingService(session_factory=async_sessionmaker(engine, class_=AsyncSession))
    app.dependency_overrides[get_gaming_service] = lambda: service

    response = TestClient(app).get("/health/ready")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"
    assert response.json()["currencies"] == ["BTC", "ETH", "VEST"]


def test_readiness_without_database(tmp_path):
    app = create_app()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'ready.db'}", poolclass=NullPool)
    service = GamingService(session_factory=async_sessionmaker(engine, class_=AsyncSession))
    app.dependency_overrides[get_gaming_service] = lambda: service

    response = TestClient(app).get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "unavailable", "database": "error"}
