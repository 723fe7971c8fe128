"""Projections of upstream payloads kept in the cache, and their cache key."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date

CASES = "cases"
HISTORY = "history"

ROUTES = {CASES, HISTORY}
HISTORY_STATUSES = {"confirmed", "deaths"}


@dataclass(frozen=True, slots=True)
class SeriesKey:
    """Cache key for one upstream query. status is None for the cases route."""

    route: str
    country: str
    status: str | None = None


@dataclass(frozen=True, slots=True)
class CountryCases:
    """Latest cumulative totals for a country (cases route)."""

    country: str
    population: int
    confirmed: int
    deaths: int


@dataclass(frozen=True, slots=True)
class CountrySeries:
    """Cumulative counts per calendar date for a country (history route)."""

    country: str
    population: int
    dates: Mapping[date, int]
