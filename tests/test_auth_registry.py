#!/usr/bin/env python3
"""Unit tests for the account registry."""

import importlib
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock


sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

registry_mod = importlib.import_module("trattoria.auth.registry")
storage = importlib.import_module("trattoria.auth.storage")
models = importlib.import_module("trattoria.auth.models")

AccountRegistry = registry_mod.AccountRegistry
LOAD_ERROR = registry_mod.LOAD_ERROR
Account = models.Account
MemoryKeyValueStore = storage.MemoryKeyValueStore
DurableStoreAdapter = storage.DurableStoreAdapter


def make_registry(items=None):
    store = MemoryKeyValueStore(items)
    return AccountRegistry(DurableStoreAdapter(store)), store


class TestLoad:
    def test_absent_record_is_empty_without_error(self):
        registry, _ = make_registry()
        assert registry.load() == ([], None)

    def test_valid_record(self):
        raw = [
            {"id": "1", "username": "mario", "password": "pw", "name": "Mario"},
            {
                "id": "2",
                "username": "luigi",
                "password": "pw2",
                "name": "Luigi",
                "lastLogin": "2024-05-01T12:00:00+00:00",
            },
        ]
        registry, _ = make_registry({"trattoria_users": json.dumps(raw)})

        accounts, error = registry.load()

        assert error is None
        assert [a.username for a in accounts] == ["mario", "luigi"]
        assert accounts[0].last_login is None
        assert accounts[1].last_login == "2024-05-01T12:00:00+00:00"

    def test_malformed_json(self):
        registry, _ = make_registry({"trattoria_users": "{not json"})
        assert registry.load() == ([], LOAD_ERROR)

    def test_schema_violation(self):
        raw = [{"id": "1", "username": "mario"}]
        registry, _ = make_registry({"trattoria_users": json.dumps(raw)})
        assert registry.load() == ([], LOAD_ERROR)

    def test_custom_key(self):
        store = MemoryKeyValueStore(
            {"other": json.dumps([{"id": "1", "username": "a", "password": "b", "name": "c"}])}
        )
        registry = AccountRegistry(DurableStoreAdapter(store), key="other")

        accounts, error = registry.load()

        assert error is None
        assert accounts[0].username == "a"


    def test_read_failure_without_message(self):
        store = MagicMock(spec=storage.KeyValueStore)
        store.get_item.side_effect = PermissionError()
        registry = AccountRegistry(DurableStoreAdapter(store))

        assert registry.load() == ([], LOAD_ERROR)


class TestAppendAndFind:
    def test_append_keeps_order_and_returns_new_list(self):
        registry, _ = make_registry()
        first = Account(id="1", username="mario", password="pw", name="Mario")
        second = Account(id="2", username="luigi", password="pw", name="Luigi")

        accounts = registry.append([], first)
        updated = registry.append(accounts, second)

        assert accounts == [first]
        assert updated == [first, second]

    def test_duplicate_usernames_are_accepted(self):
        registry, _ = make_registry()
        first = Account(id="1", username="mario", password="one", name="Mario")
        second = Account(id="2", username="mario", password="two", name="Mario II")

        accounts = registry.append(registry.append([], first), second)

        assert len(accounts) == 2
        assert registry.find_by_username(accounts, "mario") is first

    def test_find_missing(self):
        registry, _ = make_registry()
        assert registry.find_by_username([], "nobody") is None

    def test_find_is_case_sensitive(self):
        accounts = [Account(id="1", username="Mario", password="pw", name="Mario")]
        assert registry_mod.find_by_username(accounts, "mario") is None


class TestSave:
    def test_save_then_load_round_trip(self):
        registry, store = make_registry()
        account = Account(id="1", username="mario", password="pw", name="Mario")

        assert registry.save([account]) is True
        stored = json.loads(store.items["trattoria_users"])
        assert stored == [{"id": "1", "username": "mario", "password": "pw", "name": "Mario"}]

        accounts, error = registry.load()
        assert error is None
        assert accounts == [account]
