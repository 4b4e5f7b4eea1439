# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets up a throwaway environment before the app modules are imported, and
# provides fixtures for a per-test SQLite database, a fake weather upstream and
# a TestClient wired to both.
# =============================================================================

import asyncio
import os
import tempfile

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# core.config builds its settings (and db.database its engine) at import time

_TMP_DIR = tempfile.mkdtemp(prefix="farm-portal-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP_DIR}/startup.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-suite")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

import main
from db.database import Base, get_db
from db import models  # noqa: F401
from routers.deps import get_weather_pipeline
from services.weather import WeatherPipeline

GEOCODING_URL = "https://geo.test/search"
FORECAST_URL = "https://forecast.test/v1/forecast"


def run(coro):
    """Run a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    run(create_tables())
    yield engine
    run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


# =============================================================================
# Fake upstream weather services
# =============================================================================

class FakeWeatherUpstream:
    """httpx MockTransport handler standing in for Nominatim and Open-Meteo."""

    def __init__(self):
        self.geocode_results = [
            {"lat": "12.97", "lon": "77.59", "display_name": "Bengaluru, Karnataka, India"},
            {"lat": "13.00", "lon": "77.00", "display_name": "Somewhere else"},
        ]
        self.forecast = {
            "current_weather": {"temperature": 24.5, "windspeed": 11.2, "weathercode": 2},
            "daily": {
                "time": ["2024-06-01", "2024-06-02", "2024-06-03"],
                "temperature_2m_max": [29.1, 30.4, 28.0],
                "temperature_2m_min": [19.3, 20.1, 18.7],
                "precipitation_sum": [0.0, 3.2, 12.5],
                "weathercode": [2, 61, 95],
            },
        }
        self.geocode_status = 200
        self.forecast_status = 200
        self.fail_with = None
        self.requests = []

    @property
    def forecast_requests(self):
        return [r for r in self.requests if str(r.url).startswith(FORECAST_URL)]

    @property
    def geocode_requests(self):
        return [r for r in self.requests if str(r.url).startswith(GEOCODING_URL)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        if str(request.url).startswith(GEOCODING_URL):
            return httpx.Response(self.geocode_status, json=self.geocode_results)
        return httpx.Response(self.forecast_status, json=self.forecast)


@pytest.fixture
def upstream():
    return FakeWeatherUpstream()


@pytest.fixture
def http_client(upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    yield client
    run(client.aclose())


@pytest.fixture
def pipeline(http_client):
    return WeatherPipeline(http_client, geocoding_url=GEOCODING_URL, forecast_url=FORECAST_URL)


# =============================================================================
# Application
# =============================================================================

@pytest.fixture
def app(engine, session_factory, pipeline, monkeypatch):
    async def init_test_db():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    monkeypatch.setattr(main, "init_db", init_test_db)
    application = main.create_app()
    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_weather_pipeline] = lambda: pipeline
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
