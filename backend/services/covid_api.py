"""covid-api.mmediagroup.fr client.

Free API, no key required. The provider blocks clients that make absurd
amounts of requests, so only services.series_store should call this.
"""

import json
import logging

import httpx

from errors import InvalidInputError, NotFoundError, UpstreamUnavailableError
from services.models import ROUTES

logger = logging.getLogger(__name__)

# Every payload wraps its figures in this top-level key
PAYLOAD_KEY = "All"


def normalize_country(country: str) -> str:
    """Upstream country convention: first letter upper case, the rest lower case."""
    country = country.strip()
    return country[:1].upper() + country[1:].lower()


class CovidApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        max_response_bytes: int = 5 * 1024 * 1024,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._max_response_bytes = max_response_bytes
        self._timeout = timeout
        # Built on first use so constructing the app opens no connection pool
        self._client = client

    async def fetch(self, route: str, params: dict[str, str]) -> dict:
        """GET /{route} and return the decoded JSON payload."""
        if route not in ROUTES:
            raise InvalidInputError(f"Unsupported route: {route}. Supported: {sorted(ROUTES)}")

        url = f"{self._base_url}/{route}"
        logger.info("Querying covid API: %s %s", route, params)
        try:
            async with self._http().stream("GET", url, params=params) as resp:
                if resp.status_code == 404:
                    raise NotFoundError(f"No {route} data for {params}")
                if 400 <= resp.status_code < 500:
                    raise InvalidInputError(f"Upstream rejected {route} query {params} ({resp.status_code})")
                resp.raise_for_status()
                body = await self._read_limited(resp)
        except httpx.HTTPError as e:
            logger.warning("covid API request failed for %s %s: %s", route, params, e)
            raise UpstreamUnavailableError(f"covid API error: {e}") from e

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise UpstreamUnavailableError(f"covid API returned invalid JSON for {route}") from e

        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(f"covid API returned unexpected payload for {route}")
        if PAYLOAD_KEY not in payload:
            raise NotFoundError(f"No {route} data for {params}")
        return payload

    async def _read_limited(self, resp: httpx.Response) -> bytes:
        """Read the body, aborting once it grows past max_response_bytes."""
        chunks = []
        size = 0
        async for chunk in resp.aiter_bytes():
            size += len(chunk)
            if size > self._max_response_bytes:
                raise UpstreamUnavailableError(
                    f"covid API response exceeded {self._max_response_bytes} bytes"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
