"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CovidStatsError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidInputError(CovidStatsError):
    """Bad route, options or arguments supplied by the caller."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class InvalidDateRangeError(CovidStatsError):
    """Malformed date or a range that fails validation. Raised before any fetch."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NotFoundError(CovidStatsError):
    """Valid request, but the upstream source has no data for it."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class UnknownUserError(CovidStatsError):
    def __init__(self, username: str):
        super().__init__(f"Unknown user: {username}", status_code=404)
        self.username = username


class UpstreamUnavailableError(CovidStatsError):
    """Transport failure, malformed payload or an aborted upstream fetch."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(CovidStatsError)
    async def handle_covid_stats_error(_request: Request, exc: CovidStatsError):
        if exc.status_code >= 500:
            logger.warning("Request failed: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
