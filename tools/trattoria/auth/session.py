"""Session state machine.

    INITIALIZING ──load() / skip_load()──► READY

READY is terminal. The load runs exactly once; later requests are ignored.
``login``/``register``/``logout`` mutate the in-memory state first and then
persist best-effort: a failed write never rolls the change back.
"""

from __future__ import annotations

import importlib
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import jsonschema

from .models import Account, SessionRecord
from .registry import (
    DEFAULT_USERS_KEY,
    LOAD_ERROR,
    AccountRegistry,
    append,
    find_by_username,
)
from .storage import DurableStoreAdapter

session_tracker = importlib.import_module("session_tracker")
log_event = session_tracker.log_event

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "trattoria_current_user"

SESSION_SCHEMA = {
    "type": ["object", "null"],
    "required": ["id", "username", "name"],
    "properties": {
        "id": {"type": "string"},
        "username": {"type": "string"},
        "name": {"type": "string"},
        "lastLogin": {"type": ["string", "null"]},
    },
}


class Phase(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass
class SessionState:
    """Process-wide session state.

    Attributes:
        accounts: Registered accounts in insertion order.
        session: Currently authenticated identity, or None.
        ready: False until the initial load completes or is skipped.
        last_error: Diagnostic from a failed load. Never cleared automatically.
    """

    accounts: List[Account] = field(default_factory=list)
    session: Optional[SessionRecord] = None
    ready: bool = False
    last_error: Optional[str] = None


class SessionStateMachine:
    """Owns ``SessionState`` and drives its transitions.

    Args:
        adapter: Store adapter for the registry and session records.
        users_key: Storage key of the account registry.
        session_key: Storage key of the current-session record.
        persistent: When False the durable store is never touched
                    (embedded mode).
    """

    def __init__(
        self,
        adapter: DurableStoreAdapter,
        users_key: str = DEFAULT_USERS_KEY,
        session_key: str = DEFAULT_SESSION_KEY,
        persistent: bool = True,
    ) -> None:
        self.adapter = adapter
        self.registry = AccountRegistry(adapter, users_key)
        self.session_key = session_key
        self.persistent = persistent
        self.state = SessionState()
        self._load_requested = False

    @property
    def phase(self) -> Phase:
        return Phase.READY if self.state.ready else Phase.INITIALIZING

    def _claim_load(self) -> bool:
        if self._load_requested:
            logger.warning("Session initialization already requested, ignoring")
            return False
        self._load_requested = True
        return True

    def skip_load(self) -> None:
        """Mark the machine ready without touching storage."""
        if not self._claim_load():
            return
        self.state.accounts = []
        self.state.session = None
        self.state.ready = True
        logger.info("Embedded context detected, skipping session load")
        log_event("auth_load_skipped_embedded", component="session")

    def load(self) -> None:
        """Restore accounts and session from storage, then mark the machine ready."""
        if not self._claim_load():
            return

        accounts, registry_error = self.registry.load()
        session, session_error = self._read_session()

        self.state.accounts = accounts
        self.state.session = session
        error = registry_error or session_error
        if error:
            self.state.last_error = error
        self.state.ready = True

        logger.info(
            f"Session state ready: {len(accounts)} account(s), "
            f"session={'restored' if session else 'none'}"
        )
        log_event(
            "auth_loaded",
            component="session",
            accounts=len(accounts),
            restored_session=session is not None,
            error=error,
        )

    async def initialize(self) -> None:
        self.load()

    def _read_session(self) -> Tuple[Optional[SessionRecord], Optional[str]]:
        text, error = self.adapter.read(self.session_key)
        if error is not None:
            return None, LOAD_ERROR
        if text is None:
            return None, None

        try:
            data = json.loads(text)
            jsonschema.validate(data, SESSION_SCHEMA)
        except (json.JSONDecodeError, jsonschema.ValidationError) as e:
            logger.error(f"Error loading current session: {e}")
            return None, LOAD_ERROR

        if data is None:
            return None, None
        return SessionRecord.from_dict(data), None

    def _start_session(self, account: Account) -> SessionRecord:
        record = SessionRecord.from_account(account)
        self.state.session = record
        if self.persistent:
            self.adapter.write(self.session_key, json.dumps(record.to_dict()))
        return record

    async def login(self, username: str, password: str) -> bool:
        """Check credentials against the registry and start a session on match.

        Wrong credentials are not an error: the result is False and the
        current session is left as it was.
        """
        account = find_by_username(self.state.accounts, username)
        if account is None or account.password != password:
            logger.info(f"Login rejected for '{username}'")
            log_event("auth_login_failed", component="session", username=username)
            return False

        record = self._start_session(account)
        logger.info(f"Logged in as '{record.username}' ({record.id})")
        log_event(
            "auth_login_success",
            component="session",
            user_id=record.id,
            username=record.username,
        )
        return True

    async def register(self, account: Account) -> None:
        """Append ``account`` to the registry and log it in without a credential check."""
        self.state.accounts = append(self.state.accounts, account)
        if self.persistent:
            self.registry.save(self.state.accounts)

        record = self._start_session(account)
        logger.info(f"Registered and logged in as '{record.username}' ({record.id})")
        log_event(
            "auth_registered",
            component="session",
            user_id=record.id,
            username=record.username,
            accounts=len(self.state.accounts),
        )

    def logout(self) -> None:
        previous = self.state.session
        self.state.session = None
        if self.persistent:
            self.adapter.remove(self.session_key)
        log_event(
            "auth_logout",
            component="session",
            user_id=previous.id if previous else None,
        )
