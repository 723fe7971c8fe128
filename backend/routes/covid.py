"""Per-country routes backed by the cached upstream data."""

from fastapi import APIRouter, Depends, Query

from config import Settings
from dependencies import get_settings, get_store
from services.aggregation import daily_delta, ranged_delta
from services.dates import format_for_protocol, parse_protocol_date, parse_range, today
from services.models import CASES, HISTORY
from services.series_store import CountrySeriesStore

router = APIRouter(prefix="/covid")


@router.get("/daily")
async def daily(
    country: str = Query(...),
    date: str = Query(..., description="DD-MM-YYYY"),
    store: CountrySeriesStore = Depends(get_store),
) -> dict:
    """New confirmed cases for a country on one day."""
    day = parse_protocol_date(date)
    series = await store.fetch(HISTORY, country, "confirmed")
    return {
        "country": series.country,
        "date": format_for_protocol(day),
        "new_confirmed": daily_delta(series.dates, day),
    }


@router.get("/cases")
async def cases(
    country: str = Query(...),
    store: CountrySeriesStore = Depends(get_store),
) -> dict:
    """Latest cumulative totals for a country."""
    data = await store.fetch(CASES, country)
    return {
        "country": data.country,
        "population": data.population,
        "confirmed": data.confirmed,
        "deaths": data.deaths,
    }


@router.get("/history")
async def history(
    country: str = Query(...),
    status: str = Query("confirmed"),
    start: str = Query(..., alias="from", description="DD-MM-YYYY"),
    end: str = Query(..., alias="to", description="DD-MM-YYYY"),
    store: CountrySeriesStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Daily deltas for one country over an inclusive date range."""
    start_day, end_day = parse_range(start, end, today(settings.timezone))
    series = await store.fetch(HISTORY, country, status)
    deltas = ranged_delta([series], start_day, end_day)[series.country]
    return {
        "country": series.country,
        "status": status,
        "daily": {format_for_protocol(day): count for day, count in deltas.items()},
    }


@router.delete("/cache")
async def invalidate(
    country: str = Query(...),
    route: str = Query(HISTORY),
    status: str | None = Query(None),
    store: CountrySeriesStore = Depends(get_store),
) -> dict:
    """Drop one cached upstream response so the next request refetches it."""
    store.invalidate(route, country, status)
    return {"route": route, "country": country, "status": status, "invalidated": True}
