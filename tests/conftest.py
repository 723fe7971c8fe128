"""Shared pytest fixtures."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from errors import NotFoundError
from services.cache import TTLCache
from services.series_store import CountrySeriesStore
from services.users import UserRegistry


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCovidApi:
    """Stands in for CovidApiClient: serves canned payloads and counts calls."""

    def __init__(self, payloads: dict | None = None) -> None:
        self.payloads = payloads or {}
        self.calls: list[tuple[str, dict]] = []
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None
        self.closed = False

    def add(self, route: str, country: str, inner: dict, status: str | None = None) -> None:
        self.payloads[(route, country, status)] = {"All": inner}

    async def fetch(self, route: str, params: dict) -> dict:
        self.calls.append((route, dict(params)))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        key = (route, params["country"], params.get("status"))
        if key not in self.payloads:
            raise NotFoundError(f"No {route} data for {params}")
        return self.payloads[key]

    async def aclose(self) -> None:
        self.closed = True


def history_inner(country: str, population: int, dates: dict[str, int]) -> dict:
    return {
        "country": country,
        "population": population,
        "sq_km_area": 1234,
        "continent": "Somewhere",
        "dates": dates,
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture
def fake_api() -> FakeCovidApi:
    api = FakeCovidApi()
    api.add(
        "history",
        "Israel",
        history_inner("Israel", 100, {"2021-01-01": 10, "2021-01-02": 15, "2021-01-03": 12}),
        status="confirmed",
    )
    api.add(
        "history",
        "France",
        history_inner("France", 50, {"2021-01-01": 4, "2021-01-02": 10, "2021-01-03": 11}),
        status="confirmed",
    )
    api.add(
        "history",
        "Israel",
        history_inner("Israel", 100, {"2021-01-01": 1, "2021-01-02": 3}),
        status="deaths",
    )
    api.add(
        "cases",
        "Israel",
        {"country": "Israel", "population": 100, "confirmed": 15, "deaths": 3, "recovered": 9},
    )
    return api


@pytest.fixture
def store(fake_api: FakeCovidApi, cache: TTLCache) -> CountrySeriesStore:
    return CountrySeriesStore(fake_api, cache, ttl_seconds=600)


@pytest.fixture
def test_settings() -> Settings:
    settings = Settings()
    settings.users_db_path = None
    settings.timezone = None
    settings.environment = "local"
    return settings


@pytest.fixture
def registry() -> UserRegistry:
    return UserRegistry()


@pytest.fixture
def client(test_settings: Settings, fake_api: FakeCovidApi, registry: UserRegistry):
    app = create_app(settings=test_settings, client=fake_api, registry=registry)
    with TestClient(app) as test_client:
        yield test_client
