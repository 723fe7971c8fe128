"""User registry routes and the statistics computed over a user's countries.

POST   /users/{username}                        register
DELETE /users/{username}                        unregister
GET    /users/{username}/countries              followed countries
POST   /users/{username}/countries/{country}    follow
DELETE /users/{username}/countries/{country}    unfollow
GET    /users/{username}/confirmed              daily new confirmed per country
GET    /users/{username}/deaths                 daily new deaths per country
GET    /users/{username}/highest-ratio          country with highest cumulative/population per day
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from config import Settings
from dependencies import get_registry, get_settings, get_store
from services.aggregation import ranged_delta, ranged_ratio_argmax
from services.dates import format_for_protocol, parse_range, today
from services.models import HISTORY
from services.series_store import CountrySeriesStore
from services.users import UserRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@router.post("/{username}", status_code=201)
async def add_user(username: str, registry: UserRegistry = Depends(get_registry)):
    if not registry.add_user(username):
        return JSONResponse({"error": f"User already exists: {username}"}, status_code=409)
    logger.info("Registered user %s", username)
    return {"username": username.lower(), "countries": []}


@router.delete("/{username}")
async def delete_user(username: str, registry: UserRegistry = Depends(get_registry)) -> dict:
    return {"username": username.lower(), "deleted": registry.delete_user(username)}


@router.get("/{username}/countries")
async def get_countries(username: str, registry: UserRegistry = Depends(get_registry)) -> dict:
    return {"username": username.lower(), "countries": list(registry.get_countries(username))}


@router.post("/{username}/countries/{country}")
async def add_country(
    username: str, country: str, registry: UserRegistry = Depends(get_registry)
) -> dict:
    added = registry.add_country(username, country)
    return {"username": username.lower(), "added": added, "countries": list(registry.get_countries(username))}


@router.delete("/{username}/countries/{country}")
async def delete_country(
    username: str, country: str, registry: UserRegistry = Depends(get_registry)
) -> dict:
    deleted = registry.delete_country(username, country)
    return {"username": username.lower(), "deleted": deleted, "countries": list(registry.get_countries(username))}


# ---------------------------------------------------------------------------
# Ranged statistics
# ---------------------------------------------------------------------------

async def _ranged_deltas(
    username: str,
    status: str,
    start: str,
    end: str,
    registry: UserRegistry,
    store: CountrySeriesStore,
    settings: Settings,
) -> dict:
    # Validate before touching the upstream source
    start_day, end_day = parse_range(start, end, today(settings.timezone))
    countries = registry.get_countries(username)
    series_list = await store.fetch_many(countries, HISTORY, status)
    deltas = ranged_delta(series_list, start_day, end_day)
    return {
        country: {format_for_protocol(day): count for day, count in by_day.items()}
        for country, by_day in deltas.items()
    }


@router.get("/{username}/confirmed")
async def confirmed(
    username: str,
    start: str = Query(..., alias="from", description="DD-MM-YYYY"),
    end: str = Query(..., alias="to", description="DD-MM-YYYY"),
    registry: UserRegistry = Depends(get_registry),
    store: CountrySeriesStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Daily new confirmed cases for each followed country."""
    return await _ranged_deltas(username, "confirmed", start, end, registry, store, settings)


@router.get("/{username}/deaths")
async def deaths(
    username: str,
    start: str = Query(..., alias="from", description="DD-MM-YYYY"),
    end: str = Query(..., alias="to", description="DD-MM-YYYY"),
    registry: UserRegistry = Depends(get_registry),
    store: CountrySeriesStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Daily new deaths for each followed country."""
    return await _ranged_deltas(username, "deaths", start, end, registry, store, settings)


@router.get("/{username}/highest-ratio")
async def highest_ratio(
    username: str,
    start: str = Query(..., alias="from", description="DD-MM-YYYY"),
    end: str = Query(..., alias="to", description="DD-MM-YYYY"),
    status: str = Query("confirmed"),
    registry: UserRegistry = Depends(get_registry),
    store: CountrySeriesStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    """For each day, the followed country with the highest cumulative count per capita."""
    start_day, end_day = parse_range(start, end, today(settings.timezone))
    countries = registry.get_countries(username)
    series_list = await store.fetch_many(countries, HISTORY, status)
    leaders = ranged_ratio_argmax(series_list, start_day, end_day)
    return {format_for_protocol(day): country for day, country in leaders.items()}
