"""Health endpoint tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from habitladder.main import create_app


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient) -> None:
    """GET /ready returns 200 with a database check."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_readiness_degraded(settings, tmp_path) -> None:
    """An unreachable database reports degraded instead of failing the request."""
    broken = settings.model_copy(update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'no' / 'db.sqlite'}"})
    app = create_app(broken)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"] == {"database": "error"}
    assert "db.sqlite" not in response.text


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    """GET /version returns version and environment."""
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"


@pytest.mark.asyncio
async def test_version_reads_the_app_settings(settings) -> None:
    """Settings passed to create_app win over the process-wide ones."""
    app = create_app(settings.model_copy(update={"app_version": "9.9.9", "environment": "staging"}))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/version")
    assert response.json() == {"version": "9.9.9", "environment": "staging"}
