"""FastAPI dependencies exposing the instances built in app.create_app."""

from fastapi import Request

from config import Settings
from services.cache import TTLCache
from services.series_store import CountrySeriesStore
from services.users import UserRegistry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_store(request: Request) -> CountrySeriesStore:
    return request.app.state.store


def get_registry(request: Request) -> UserRegistry:
    return request.app.state.registry
