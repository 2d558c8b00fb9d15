"""Account registry: an ordered list of accounts mirrored to durable storage."""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Tuple

import jsonschema

from .models import Account
from .storage import DurableStoreAdapter

logger = logging.getLogger(__name__)

DEFAULT_USERS_KEY = "trattoria_users"

LOAD_ERROR = "Failed to load user data"

ACCOUNT_SCHEMA = {
    "type": "object",
    "required": ["id", "username", "password", "name"],
    "properties": {
        "id": {"type": "string"},
        "username": {"type": "string"},
        "password": {"type": "string"},
        "name": {"type": "string"},
        "lastLogin": {"type": ["string", "null"]},
    },
}

REGISTRY_SCHEMA = {"type": "array", "items": ACCOUNT_SCHEMA}


def find_by_username(accounts: List[Account], username: str) -> Optional[Account]:
    """Return the first account registered under ``username``, in insertion order."""
    for account in accounts:
        if account.username == username:
            return account
    return None


def append(accounts: List[Account], account: Account) -> List[Account]:
    """Return a new list with ``account`` at the end. Duplicates are accepted."""
    return [*accounts, account]


class AccountRegistry:
    """Reads and writes the registry record through a ``DurableStoreAdapter``.

    Args:
        adapter: Store adapter holding the registry record.
        key: Storage key of the registry record.
    """

    def __init__(self, adapter: DurableStoreAdapter, key: str = DEFAULT_USERS_KEY) -> None:
        self.adapter = adapter
        self.key = key

    def load(self) -> Tuple[List[Account], Optional[str]]:
        """Load the persisted registry.

        Returns:
            ``(accounts, None)`` on success or when nothing is stored yet,
            ``([], LOAD_ERROR)`` when the record is unreadable or malformed.
        """
        text, error = self.adapter.read(self.key)
        if error is not None:
            return [], LOAD_ERROR
        if text is None:
            return [], None

        try:
            data = json.loads(text)
            jsonschema.validate(data, REGISTRY_SCHEMA)
        except (json.JSONDecodeError, jsonschema.ValidationError) as e:
            logger.error(f"Error loading account registry: {e}")
            return [], LOAD_ERROR

        return [Account.from_dict(item) for item in data], None

    def save(self, accounts: List[Account]) -> bool:
        payload = json.dumps([account.to_dict() for account in accounts])
        return self.adapter.write(self.key, payload)

    def append(self, accounts: List[Account], account: Account) -> List[Account]:
        return append(accounts, account)

    def find_by_username(self, accounts: List[Account], username: str) -> Optional[Account]:
        return find_by_username(accounts, username)
