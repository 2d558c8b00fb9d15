import pytest


@pytest.fixture(autouse=True)
def isolated_event_log(tmp_path, monkeypatch):
    """Keep auth events out of the working tree."""
    path = tmp_path / "auth-events.jsonl"
    monkeypatch.setenv("TRATTORIA_EVENT_LOG", str(path))
    return path
