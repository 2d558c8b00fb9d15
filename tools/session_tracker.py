from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

EVENT_LOG_ENV = "TRATTORIA_EVENT_LOG"


def _looks_like_project_root(path: Path) -> bool:
    return (path / ".trattoria").exists()


def detect_repo_root() -> Path:
    cwd = Path.cwd()
    if _looks_like_project_root(cwd):
        return cwd

    here = Path(__file__)
    for parent in [here.parent, *here.parents]:
        if _looks_like_project_root(parent):
            return parent

    return here.parent.parent


def event_log_path(repo_root: Path | None = None) -> Path:
    override = os.environ.get(EVENT_LOG_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    root = repo_root or detect_repo_root()
    return root / ".trattoria/auth-events.jsonl"


def log_event(event_type: str, **details: Any) -> None:
    try:
        file_path = event_log_path()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            **details,
        }
        with file_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(event, ensure_ascii=True) + "\n")
    except OSError:
        pass


def read_events(limit: int = 10) -> list[dict[str, Any]]:
    """Read the last ``limit`` auth events, oldest first."""
    file_path = event_log_path()
    if not file_path.exists():
        return []

    lines = file_path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines[-limit:] if line.strip()]
