"""Cached access to upstream country data.

Each upstream response is projected down to the fields the aggregation code
needs and kept for a fixed TTL. Concurrent misses for the same key share one
upstream request.
"""

import asyncio
import logging
from collections.abc import Iterable
from datetime import date

from errors import InvalidInputError, UpstreamUnavailableError
from services.cache import TTLCache
from services.covid_api import PAYLOAD_KEY, CovidApiClient, normalize_country
from services.models import (
    CASES,
    HISTORY,
    HISTORY_STATUSES,
    ROUTES,
    CountryCases,
    CountrySeries,
    SeriesKey,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600


class CountrySeriesStore:
    def __init__(
        self,
        client: CovidApiClient,
        cache: TTLCache,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ):
        self._client = client
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._in_flight: dict[SeriesKey, asyncio.Task] = {}

    async def fetch(
        self, route: str, country: str, status: str | None = None
    ) -> CountryCases | CountrySeries:
        """Return cached data for the key, querying upstream on a miss."""
        key = make_key(route, country, status)

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None or task.done():
            logger.debug("Cache miss for %s", key)
            task = asyncio.ensure_future(self._load(key))
            self._in_flight[key] = task
            task.add_done_callback(lambda t: self._forget(key, t))
        else:
            logger.debug("Joining in-flight fetch for %s", key)

        # Shielded so a cancelled caller does not cancel the fetch for the others
        return await asyncio.shield(task)

    async def fetch_many(
        self, countries: Iterable[str], route: str, status: str | None = None
    ) -> list[CountryCases | CountrySeries]:
        """fetch() for every country concurrently. Any failure fails the batch."""
        return list(
            await asyncio.gather(*[self.fetch(route, country, status) for country in countries])
        )

    def invalidate(self, route: str, country: str, status: str | None = None) -> None:
        self._cache.delete(make_key(route, country, status))

    async def _load(self, key: SeriesKey) -> CountryCases | CountrySeries:
        params = {"country": key.country}
        if key.status is not None:
            params["status"] = key.status

        payload = await self._client.fetch(key.route, params)
        data = project(key, payload)
        self._cache.set(key, data, ttl_seconds=self._ttl_seconds)
        return data

    def _forget(self, key: SeriesKey, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the failure as retrieved when every waiter went away
        if not task.cancelled():
            task.exception()


def make_key(route: str, country: str, status: str | None = None) -> SeriesKey:
    """Validate the query and build its canonical cache key."""
    if route not in ROUTES:
        raise InvalidInputError(f"Unsupported route: {route}. Supported: {sorted(ROUTES)}")
    if not country or not country.strip():
        raise InvalidInputError("country is required")
    if route == HISTORY and status not in HISTORY_STATUSES:
        raise InvalidInputError(
            f"Unsupported status: {status}. Supported: {sorted(HISTORY_STATUSES)}"
        )
    if route == CASES and status is not None:
        raise InvalidInputError("status is only supported for the history route")
    return SeriesKey(route=route, country=normalize_country(country), status=status)


def project(key: SeriesKey, payload: dict) -> CountryCases | CountrySeries:
    """Keep only the fields needed downstream, discarding the rest of the payload."""
    inner = payload[PAYLOAD_KEY]
    try:
        country = inner.get("country") or key.country
        population = int(inner.get("population") or 0)
        if key.route == CASES:
            return CountryCases(
                country=country,
                population=population,
                confirmed=int(inner["confirmed"]),
                deaths=int(inner["deaths"]),
            )
        return CountrySeries(
            country=country,
            population=population,
            dates={date.fromisoformat(day): int(count) for day, count in inner["dates"].items()},
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise UpstreamUnavailableError(
            f"covid API returned malformed {key.route} data for {key.country}: {e}"
        ) from e
