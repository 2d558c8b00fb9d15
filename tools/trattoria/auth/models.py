"""Account and session record types.

Both types serialize to the JSON shapes kept in the durable store. The wire
format uses ``lastLogin`` (camelCase) for the login timestamp; everything else
maps one-to-one onto the dataclass fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Account:
    """A registered user.

    Attributes:
        id: Opaque identifier chosen by the caller at registration time.
        username: Login key. Not required to be unique.
        password: Plaintext credential, compared by exact match.
        name: Display name.
        last_login: ISO timestamp of the most recent login, if any.
    """

    id: str
    username: str
    password: str
    name: str
    last_login: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "name": self.name,
        }
        if self.last_login is not None:
            data["lastLogin"] = self.last_login
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            username=data["username"],
            password=data["password"],
            name=data["name"],
            last_login=data.get("lastLogin"),
        )


@dataclass
class SessionRecord:
    """The currently authenticated identity: an Account without its password."""

    id: str
    username: str
    name: str
    last_login: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "lastLogin": self.last_login,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        return cls(
            id=data["id"],
            username=data["username"],
            name=data["name"],
            last_login=data.get("lastLogin"),
        )

    @classmethod
    def from_account(cls, account: Account, last_login: Optional[str] = None) -> "SessionRecord":
        """Project an account into a session record stamped with ``last_login`` (default: now)."""
        return cls(
            id=account.id,
            username=account.username,
            name=account.name,
            last_login=last_login or now_iso(),
        )
