"""Health and readiness check routes."""

from fastapi import APIRouter, Depends

from config import Settings
from dependencies import get_cache, get_registry, get_settings
from services.cache import TTLCache
from services.users import UserRegistry

router = APIRouter()


@router.get("/ready")
async def ready(settings: Settings = Depends(get_settings)) -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "covid-stats-api", "commit": settings.git_sha}


@router.get("/health")
async def health(
    settings: Settings = Depends(get_settings),
    cache: TTLCache = Depends(get_cache),
    registry: UserRegistry = Depends(get_registry),
) -> dict:
    """Readiness plus cache and registry sizes. Never calls the rate-limited upstream."""
    purged = cache.purge_expired()
    return {
        "status": "ok",
        "service": "covid-stats-api",
        "commit": settings.git_sha,
        "cache_entries": len(cache),
        "cache_purged": purged,
        "users": len(registry),
    }
