"""Configuration loading.

Config file layout (JSON)::

    {
        "storage": {
            "db_path": ".trattoria/storage.db",
            "users_key": "trattoria_users",
            "session_key": "trattoria_current_user"
        },
        "log_level": "INFO"
    }

Every key is optional.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .auth.registry import DEFAULT_USERS_KEY
from .auth.session import DEFAULT_SESSION_KEY
from .auth.storage import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".trattoria/config.json"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class AuthConfig:
    db_path: str = DEFAULT_DB_PATH
    users_key: str = DEFAULT_USERS_KEY
    session_key: str = DEFAULT_SESSION_KEY
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthConfig":
        storage = data.get("storage", {})
        log_level = str(data.get("log_level", "INFO")).upper()
        if log_level not in LOG_LEVELS:
            logger.warning(f"Unknown log_level '{data['log_level']}' in config, using INFO")
            log_level = "INFO"
        return cls(
            db_path=storage.get("db_path", DEFAULT_DB_PATH),
            users_key=storage.get("users_key", DEFAULT_USERS_KEY),
            session_key=storage.get("session_key", DEFAULT_SESSION_KEY),
            log_level=log_level,
        )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> AuthConfig:
    """Load configuration from a JSON file. A missing file yields defaults."""
    path = Path(config_path)
    if not path.exists():
        logger.debug(f"Config not found at {path}, using defaults")
        return AuthConfig()

    with open(path) as f:
        return AuthConfig.from_dict(json.load(f))
