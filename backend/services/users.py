"""Registry of users and the countries each one follows.

Unlike the cached upstream data, this survives restarts when a path is
configured: it is saved as JSON on shutdown and loaded on startup.
"""

import json
import logging
from pathlib import Path

from errors import UnknownUserError
from services.covid_api import normalize_country

logger = logging.getLogger(__name__)


class UserRegistry:
    def __init__(self):
        self._users: dict[str, set[str]] = {}

    @staticmethod
    def _normalize_username(username: str) -> str:
        return username.strip().lower()

    def _countries_of(self, username: str) -> set[str]:
        countries = self._users.get(self._normalize_username(username))
        if countries is None:
            raise UnknownUserError(username)
        return countries

    def add_user(self, username: str) -> bool:
        """Register a user. False if already registered."""
        name = self._normalize_username(username)
        if not name:
            raise ValueError("username is required")
        if name in self._users:
            return False
        self._users[name] = set()
        return True

    def delete_user(self, username: str) -> bool:
        return self._users.pop(self._normalize_username(username), None) is not None

    def add_country(self, username: str, country: str) -> bool:
        """Follow a country. False if the user already follows it."""
        countries = self._countries_of(username)
        country = normalize_country(country)
        if not country:
            raise ValueError("country is required")
        if country in countries:
            return False
        countries.add(country)
        return True

    def delete_country(self, username: str, country: str) -> bool:
        countries = self._countries_of(username)
        country = normalize_country(country)
        if country not in countries:
            return False
        countries.remove(country)
        return True

    def get_countries(self, username: str) -> tuple[str, ...]:
        """Sorted snapshot of the countries a user follows."""
        return tuple(sorted(self._countries_of(username)))

    def __contains__(self, username: str) -> bool:
        return self._normalize_username(username) in self._users

    def __len__(self) -> int:
        return len(self._users)

    def serialize(self) -> str:
        return json.dumps(
            {
                "dataType": "Map",
                "value": [
                    [name, {"dataType": "Set", "value": sorted(countries)}]
                    for name, countries in sorted(self._users.items())
                ],
            }
        )

    def deserialize(self, data: str) -> None:
        """Replace the registry contents with serialized data."""
        try:
            parsed = json.loads(data)
        except ValueError as e:
            raise ValueError(f"Invalid serialized registry: {e}") from e

        if not isinstance(parsed, dict) or parsed.get("dataType") != "Map":
            raise ValueError("Invalid serialized registry: expected a Map")

        users: dict[str, set[str]] = {}
        for entry in parsed.get("value", []):
            if (
                not isinstance(entry, list)
                or len(entry) != 2
                or not isinstance(entry[1], dict)
                or entry[1].get("dataType") != "Set"
            ):
                raise ValueError(f"Invalid serialized registry entry: {entry!r}")
            name, countries = entry[0], entry[1].get("value")
            if (
                not isinstance(name, str)
                or not isinstance(countries, list)
                or not all(isinstance(country, str) for country in countries)
            ):
                raise ValueError(f"Invalid serialized registry entry: {entry!r}")
            users[self._normalize_username(name)] = {normalize_country(country) for country in countries}
        self._users = users

    def load(self, path: str | Path) -> None:
        path = Path(path)
        if not path.exists():
            logger.info("No user registry at %s, starting empty", path)
            return
        self.deserialize(path.read_text(encoding="utf-8"))
        logger.info("Loaded %d users from %s", len(self._users), path)

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.serialize(), encoding="utf-8")
        logger.info("Saved %d users to %s", len(self._users), path)
