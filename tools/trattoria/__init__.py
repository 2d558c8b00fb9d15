"""
Trattoria: client-side session state for the Trattoria app.

Components:
    - KeyValueStore / DurableStoreAdapter: best-effort persistence of two records
    - AccountRegistry: ordered account list with username lookup
    - SessionStateMachine: INITIALIZING → READY, login/register/logout
    - AuthProvider / AuthContext: scoped facade, embedded-frame demo bypass
"""

__version__ = "0.1.0"

from .auth import Account, AuthContext, AuthContextError, AuthProvider, HostFrame, use_auth
from .config import AuthConfig, load_config

__all__ = [
    "Account",
    "AuthContext",
    "AuthContextError",
    "AuthProvider",
    "HostFrame",
    "use_auth",
    "AuthConfig",
    "load_config",
]
