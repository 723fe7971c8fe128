"""Tests for the user registry."""

import json

import pytest

from errors import UnknownUserError
from services.users import UserRegistry


class TestUsers:
    def test_add_user_once(self, registry: UserRegistry) -> None:
        assert registry.add_user("Shaked") is True
        assert registry.add_user("SHAKED") is False
        assert "shaked" in registry
        assert len(registry) == 1

    def test_delete_user(self, registry: UserRegistry) -> None:
        registry.add_user("keren")
        assert registry.delete_user("Keren") is True
        assert registry.delete_user("keren") is False

    def test_empty_username_rejected(self, registry: UserRegistry) -> None:
        with pytest.raises(ValueError):
            registry.add_user("  ")


class TestCountries:
    def test_add_and_list(self, registry: UserRegistry) -> None:
        registry.add_user("shaked")
        assert registry.add_country("shaked", "israel") is True
        assert registry.add_country("ShaKed", "ISRAEL") is False
        registry.add_country("shaked", "France")
        assert registry.get_countries("shaked") == ("France", "Israel")

    def test_delete_country(self, registry: UserRegistry) -> None:
        registry.add_user("shaked")
        registry.add_country("shaked", "Israel")
        assert registry.delete_country("shaked", "israel") is True
        assert registry.delete_country("shaked", "israel") is False
        assert registry.get_countries("shaked") == ()

    @pytest.mark.parametrize("method", ["add_country", "delete_country"])
    def test_unknown_user(self, registry: UserRegistry, method: str) -> None:
        with pytest.raises(UnknownUserError):
            getattr(registry, method)("ghost", "Israel")

    def test_get_countries_unknown_user(self, registry: UserRegistry) -> None:
        with pytest.raises(UnknownUserError):
            registry.get_countries("ghost")


class TestSerialization:
    def test_round_trip(self, registry: UserRegistry) -> None:
        registry.add_user("shaked")
        registry.add_user("keren")
        registry.add_country("shaked", "Israel")
        registry.add_country("shaked", "France")

        restored = UserRegistry()
        restored.deserialize(registry.serialize())
        assert restored.get_countries("shaked") == ("France", "Israel")
        assert restored.get_countries("keren") == ()

    def test_serialized_shape(self, registry: UserRegistry) -> None:
        registry.add_user("shaked")
        registry.add_country("shaked", "Israel")
        assert json.loads(registry.serialize()) == {
            "dataType": "Map",
            "value": [["shaked", {"dataType": "Set", "value": ["Israel"]}]],
        }

    @pytest.mark.parametrize(
        "data",
        [
            "not json",
            json.dumps({"dataType": "List", "value": []}),
            json.dumps({"dataType": "Map", "value": [["shaked", {"dataType": "List", "value": []}]]}),
            json.dumps({"dataType": "Map", "value": [["shaked", {"dataType": "Set"}]]}),
            json.dumps({"dataType": "Map", "value": [[7, {"dataType": "Set", "value": []}]]}),
            json.dumps({"dataType": "Map", "value": [["shaked", {"dataType": "Set", "value": [1]}]]}),
        ],
    )
    def test_invalid_data(self, registry: UserRegistry, data: str) -> None:
        with pytest.raises(ValueError):
            registry.deserialize(data)

    def test_loaded_countries_are_normalized(self, registry: UserRegistry) -> None:
        registry.deserialize(
            json.dumps({"dataType": "Map", "value": [["Shaked", {"dataType": "Set", "value": ["israel"]}]]})
        )
        assert registry.get_countries("shaked") == ("Israel",)
        assert registry.add_country("shaked", "Israel") is False
        assert registry.get_countries("shaked") == ("Israel",)

    def test_save_and_load(self, registry: UserRegistry, tmp_path) -> None:
        registry.add_user("shaked")
        registry.add_country("shaked", "Israel")
        path = tmp_path / "users" / "db.json"
        registry.save(path)

        loaded = UserRegistry()
        loaded.load(path)
        assert loaded.get_countries("shaked") == ("Israel",)

    def test_load_missing_file_keeps_empty(self, registry: UserRegistry, tmp_path) -> None:
        registry.load(tmp_path / "missing.json")
        assert len(registry) == 0
