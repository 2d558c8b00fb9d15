"""Embedded-context policy.

When the application runs inside a foreign frame, its storage may be
sandboxed or unavailable. In that case the session machinery is bypassed and a
fixed demo identity is shown instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .models import SessionRecord, now_iso

DEMO_USER_ID = "demo"
DEMO_USERNAME = "demo"
DEMO_NAME = "Demo User"


@dataclass
class HostFrame:
    """Frame identities supplied by the host.

    ``window`` is the application's own frame and ``parent`` the frame that
    contains it. A top-level page is its own parent.
    """

    window: Any = field(default_factory=object)
    parent: Optional[Any] = None

    def __post_init__(self) -> None:
        if self.parent is None:
            self.parent = self.window

    @classmethod
    def top_level(cls) -> "HostFrame":
        return cls()

    @classmethod
    def nested(cls, parent: Any = None) -> "HostFrame":
        return cls(window=object(), parent=parent if parent is not None else object())


def is_embedded(frame: HostFrame) -> bool:
    return frame.window is not frame.parent


def demo_user(last_login: Optional[str] = None) -> SessionRecord:
    return SessionRecord(
        id=DEMO_USER_ID,
        username=DEMO_USERNAME,
        name=DEMO_NAME,
        last_login=last_login or now_iso(),
    )
