"""Tests for settings validation."""

import logging

from fastapi.testclient import TestClient

from app import create_app
from config import Settings


class TestValidate:
    def test_defaults_are_valid(self, test_settings: Settings) -> None:
        assert test_settings.validate() == []

    def test_non_positive_limits(self, test_settings: Settings) -> None:
        test_settings.cache_ttl_seconds = 0
        test_settings.max_request_bytes = -1
        problems = test_settings.validate()
        assert len(problems) == 2
        assert any("CACHE_TTL_SECONDS" in problem for problem in problems)

    def test_known_timezone(self, test_settings: Settings) -> None:
        test_settings.timezone = "Asia/Jerusalem"
        assert test_settings.validate() == []

    def test_unknown_timezone(self, test_settings: Settings) -> None:
        test_settings.timezone = "Mars/Olympus"
        problems = test_settings.validate()
        assert len(problems) == 1
        assert "TIMEZONE" in problems[0]


def test_invalid_settings_are_logged_at_startup(test_settings, fake_api, caplog) -> None:
    test_settings.timezone = "Mars/Olympus"
    with caplog.at_level(logging.WARNING, logger="app"):
        with TestClient(create_app(settings=test_settings, client=fake_api)):
            pass
    assert any("TIMEZONE" in record.getMessage() for record in caplog.records)
