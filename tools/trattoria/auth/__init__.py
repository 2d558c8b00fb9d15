"""
Trattoria Auth: local session and account state.

Keeps a registry of accounts and the currently logged-in identity in a host
key-value store, and exposes login/logout/registration through a facade.
Inside a foreign frame, storage is skipped and a fixed demo identity is used.

Usage:
    from trattoria.auth import AuthProvider, HostFrame, MemoryKeyValueStore

    with AuthProvider(MemoryKeyValueStore(), HostFrame.top_level()) as provider:
        auth = provider.use_auth()
        auth.is_authenticated  # False
"""

from .embedding import HostFrame, demo_user, is_embedded
from .models import Account, SessionRecord
from .provider import AuthContext, AuthContextError, AuthProvider, use_auth
from .registry import AccountRegistry, find_by_username
from .session import Phase, SessionState, SessionStateMachine
from .storage import (
    DurableStoreAdapter,
    KeyValueStore,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
)

__all__ = [
    "Account",
    "SessionRecord",
    "HostFrame",
    "demo_user",
    "is_embedded",
    "AuthContext",
    "AuthContextError",
    "AuthProvider",
    "use_auth",
    "AccountRegistry",
    "find_by_username",
    "Phase",
    "SessionState",
    "SessionStateMachine",
    "DurableStoreAdapter",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
