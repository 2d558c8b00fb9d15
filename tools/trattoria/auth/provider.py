"""Consumer-facing auth facade.

``AuthProvider`` is built once at application start and handed to whoever
needs it. It owns the session state machine and defines the scope in which
the ``AuthContext`` facade may be used::

    store = SQLiteKeyValueStore(".trattoria/storage.db")
    async with AuthProvider(store, HostFrame.top_level()) as provider:
        auth = provider.use_auth()
        await provider.wait_ready()
        if not auth.is_authenticated:
            await auth.login("mario", "pw")

Using the facade outside that scope raises ``AuthContextError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional

from .embedding import HostFrame, demo_user, is_embedded
from .models import Account, SessionRecord
from .session import SessionStateMachine
from .storage import DurableStoreAdapter, KeyValueStore

if TYPE_CHECKING:
    from ..config import AuthConfig

logger = logging.getLogger(__name__)


class AuthContextError(RuntimeError):
    """The auth facade was used outside an active ``AuthProvider``."""


class AuthContext:
    """Read-only view of the session state plus the auth operations."""

    def __init__(self, provider: "AuthProvider") -> None:
        self._provider = provider

    @property
    def _machine(self) -> SessionStateMachine:
        self._provider._require_active()
        return self._provider.machine

    @property
    def user(self) -> Optional[SessionRecord]:
        machine = self._machine
        if self._provider.embedded:
            return self._provider.demo_user
        return machine.state.session

    @property
    def is_authenticated(self) -> bool:
        machine = self._machine
        if self._provider.embedded:
            return True
        return machine.state.session is not None

    @property
    def loading(self) -> bool:
        machine = self._machine
        if self._provider.embedded:
            return False
        return not machine.state.ready

    @property
    def error(self) -> Optional[str]:
        return self._machine.state.last_error

    async def login(self, username: str, password: str) -> bool:
        machine = self._machine
        await self._provider.wait_ready()
        return await machine.login(username, password)

    def logout(self) -> None:
        self._machine.logout()

    async def register(self, account: Account) -> None:
        """Waits for the initial load so the stored registry is extended, not replaced."""
        machine = self._machine
        await self._provider.wait_ready()
        await machine.register(account)


class AuthProvider:
    """Owns the session state machine and the scope of its facade.

    Args:
        store: Host key-value store. Never touched in embedded mode.
        frame: Host frame identities used by the embedded-context check.
               Defaults to a top-level frame.
        config: Storage keys. Defaults to ``AuthConfig()``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        frame: Optional[HostFrame] = None,
        config: Optional["AuthConfig"] = None,
    ) -> None:
        if config is None:
            from ..config import AuthConfig

            config = AuthConfig()

        self.config = config
        self.frame = frame or HostFrame.top_level()
        self.embedded = is_embedded(self.frame)
        self.demo_user = demo_user() if self.embedded else None
        self.machine = SessionStateMachine(
            DurableStoreAdapter(store),
            users_key=config.users_key,
            session_key=config.session_key,
            persistent=not self.embedded,
        )
        self.context = AuthContext(self)
        self._active = False
        self._load_task: Optional[asyncio.Task] = None
        self._initialize()

    def _initialize(self) -> None:
        if self.embedded:
            self.machine.skip_load()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.machine.load()
            return

        self._load_task = loop.create_task(self.machine.initialize())

    async def wait_ready(self) -> None:
        """Wait for the initial load to finish. Returns at once if already ready."""
        if self._load_task is not None:
            await self._load_task

    @property
    def active(self) -> bool:
        return self._active

    @property
    def accounts(self) -> List[Account]:
        """Registered accounts in registration order."""
        self._require_active()
        return list(self.machine.state.accounts)

    def _require_active(self) -> None:
        if not self._active:
            raise AuthContextError("use_auth must be used within an AuthProvider")

    def use_auth(self) -> AuthContext:
        self._require_active()
        return self.context

    def __enter__(self) -> "AuthProvider":
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._active = False

    async def __aenter__(self) -> "AuthProvider":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.__exit__(exc_type, exc, tb)


def use_auth(provider: Optional[AuthProvider]) -> AuthContext:
    """Return the facade of ``provider``, failing fast outside its scope."""
    if provider is None:
        raise AuthContextError("use_auth must be used within an AuthProvider")
    return provider.use_auth()
