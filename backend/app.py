"""FastAPI application entry point for the covid stats API."""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.covid_api import CovidApiClient
from services.series_store import CountrySeriesStore
from services.users import UserRegistry

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # Structured logging: JSON for production, human-readable for local
    if settings.is_production:
        logging.basicConfig(
            level=logging.INFO,
            format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
            stream=sys.stdout,
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def create_app(
    settings: Settings | None = None,
    client: CovidApiClient | None = None,
    registry: UserRegistry | None = None,
) -> FastAPI:
    settings = settings or default_settings

    cache = TTLCache()
    if client is None:
        client = CovidApiClient(
            settings.covid_api_url,
            timeout=settings.upstream_timeout_seconds,
            max_response_bytes=settings.max_response_bytes,
        )
    store = CountrySeriesStore(client, cache, ttl_seconds=settings.cache_ttl_seconds)
    if registry is None:
        registry = UserRegistry()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        missing = settings.validate()
        if missing:
            logger.warning("Invalid settings: %s", ", ".join(missing))
        if settings.users_db_path:
            registry.load(settings.users_db_path)
        logger.info("Covid stats API ready (commit %s)", settings.git_sha)
        try:
            yield
        finally:
            if settings.users_db_path:
                registry.save(settings.users_db_path)
            await client.aclose()

    app = FastAPI(title="Covid Stats API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = cache
    app.state.store = store
    app.state.registry = registry

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request size limit. Only declared Content-Length is checked: no route reads a
    # request body, so chunked bodies are never buffered.
    @app.middleware("http")
    async def limit_request_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_request_bytes:
            return JSONResponse(
                {"error": f"Request body exceeds {settings.max_request_bytes} bytes"},
                status_code=413,
            )
        return await call_next(request)

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.covid import router as covid_router
    from routes.health import router as health_router
    from routes.users import router as users_router

    app.include_router(health_router)
    app.include_router(covid_router)
    app.include_router(users_router)

    return app


configure_logging(default_settings)

app = create_app()


def main() -> None:
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    main()
