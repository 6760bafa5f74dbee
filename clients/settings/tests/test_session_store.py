import json
import stat
from pathlib import Path

import pytest

from settings_app import session_store
from settings_app.session_store import SessionBinding


def test_missing_or_corrupt_file_loads_nothing(tmp_path: Path):
    path = tmp_path / "session.json"
    assert session_store.load_binding(path) is None
    path.write_text("{not json", encoding="utf-8")
    assert session_store.load_binding(path) is None
    path.write_text(json.dumps({"homeserver_url": "https://hs"}), encoding="utf-8")
    assert session_store.load_binding(path) is None


def test_save_and_load_round_trip_is_private(tmp_path: Path):
    path = tmp_path / "nested" / "session.json"
    binding = SessionBinding("https://hs.example.org", "tok", "https://is.example.org")
    session_store.save_binding(binding, path)

    assert session_store.load_binding(path) == binding
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert not path.with_suffix(path.suffix + ".tmp").exists()


def test_set_and_clear_identity_server(tmp_path: Path):
    path = tmp_path / "session.json"
    session_store.save_binding(SessionBinding("https://hs", "tok"), path)

    updated = session_store.set_identity_server("https://is.example.org", path)
    assert updated.identity_server_url == "https://is.example.org"
    assert session_store.load_binding(path).identity_server_url == "https://is.example.org"

    cleared = session_store.set_identity_server(None, path)
    assert cleared.identity_server_url is None
    assert session_store.load_binding(path).identity_server_url is None


def test_blank_identity_server_loads_as_unbound(tmp_path: Path):
    path = tmp_path / "session.json"
    path.write_text(
        json.dumps({"homeserver_url": "https://hs", "access_token": "t", "identity_server_url": " "}),
        encoding="utf-8",
    )
    assert session_store.load_binding(path).identity_server_url is None


def test_set_identity_server_without_session_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        session_store.set_identity_server("https://is", tmp_path / "missing.json")
