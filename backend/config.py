"""Centralized configuration — all env vars in one place."""

import os

import pandas as pd


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.host: str = os.getenv("HOST", "127.0.0.1")
        self.port: int = int(os.getenv("PORT", "8080"))

        # Upstream covid-19 API. Provider asks for responses to be cached >= 10 minutes.
        self.covid_api_url: str = os.getenv("COVID_API_URL", "https://covid-api.mmediagroup.fr/v1")
        self.cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "600"))
        self.upstream_timeout_seconds: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))
        self.max_response_bytes: int = int(os.getenv("MAX_RESPONSE_BYTES", str(5 * 1024 * 1024)))
        self.max_request_bytes: int = int(os.getenv("MAX_REQUEST_BYTES", str(1024 * 1024)))

        # User registry persistence (unset = in-memory only)
        self.users_db_path: str | None = os.getenv("USERS_DB_PATH")
        self.timezone: str | None = os.getenv("TIMEZONE")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of settings with unusable values."""
        limits = {
            "CACHE_TTL_SECONDS": self.cache_ttl_seconds,
            "UPSTREAM_TIMEOUT_SECONDS": self.upstream_timeout_seconds,
            "MAX_RESPONSE_BYTES": self.max_response_bytes,
            "MAX_REQUEST_BYTES": self.max_request_bytes,
        }
        problems = [f"{name} must be positive (got {value})" for name, value in limits.items() if value <= 0]
        if self.timezone:
            try:
                pd.Timestamp.now(tz=self.timezone)
            except (KeyError, ValueError) as e:
                problems.append(f"TIMEZONE is not a known time zone ({self.timezone}): {e}")
        return problems


settings = Settings()
