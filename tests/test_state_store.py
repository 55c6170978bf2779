# tests/test_state_store.py

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

from keh_studio.storage.adapter import StateStoreAdapter
from keh_studio.storage.defaults import DATA_VERSION, default_app_state
from keh_studio.storage.migrations import run_migrations
from keh_studio.storage.state_store import SQLiteStateStore


def test_empty_db_is_seeded_with_defaults(tmp_path: Path) -> None:
    store = SQLiteStateStore(tmp_path / "state.sqlite3")
    doc = store.read()

    assert doc["version"] == DATA_VERSION
    assert doc["currentUserId"] == "u1"
    assert doc["isLoggedIn"] is False
    assert doc["settings"]["adminPin"] is None
    assert [u["userId"] for u in doc["users"]] == ["u1", "u2"]


def test_writes_persist_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "state.sqlite3"
    store = SQLiteStateStore(db)
    store.write(lambda doc: {**doc, "currentUserId": "u2"})

    reopened = SQLiteStateStore(db)
    assert reopened.read()["currentUserId"] == "u2"


def test_read_returns_a_copy(tmp_path: Path) -> None:
    store = SQLiteStateStore(tmp_path / "state.sqlite3")
    doc = store.read()
    doc["users"].clear()
    assert store.read()["users"] != []


def test_failed_update_commits_nothing(tmp_path: Path) -> None:
    store = StateStoreAdapter(SQLiteStateStore(tmp_path / "state.sqlite3"))
    before = store.read()

    def broken(doc):
        doc["currentUserId"] = "u2"
        raise RuntimeError("halfway")

    with pytest.raises(RuntimeError):
        store.mutate(broken)
    assert store.read() == before

    with pytest.raises(TypeError):
        store.mutate(lambda doc: None)  # type: ignore[arg-type,return-value]
    assert store.read() == before


def test_older_stored_document_is_migrated_on_load(tmp_path: Path) -> None:
    db = tmp_path / "state.sqlite3"
    SQLiteStateStore(db)  # creates the schema

    legacy = {"version": 1, "currentUserId": "u1", "settings": {"themeMode": "dark"}, "events": [{"eventId": "e1"}]}
    conn = sqlite3.connect(db)
    try:
        conn.execute(
            "UPDATE app_state SET version = ?, document = ? WHERE id = 1",
            (1, json.dumps(legacy)),
        )
        conn.commit()
    finally:
        conn.close()

    doc = SQLiteStateStore(db).read()
    assert doc["version"] == DATA_VERSION
    assert doc["notifications"] == []
    assert doc["settings"]["adminPin"] is None
    assert doc["events"][0]["tasks"] == []


def test_reload_discards_in_memory_view(tmp_path: Path) -> None:
    db = tmp_path / "state.sqlite3"
    a = StateStoreAdapter(SQLiteStateStore(db))
    b = StateStoreAdapter(SQLiteStateStore(db))

    a.update_fields(currentUserId="u2")
    assert b.get("currentUserId") == "u1"
    assert b.reload()["currentUserId"] == "u2"


def test_replace_drops_keys_not_in_new_document(tmp_path: Path) -> None:
    store = StateStoreAdapter(SQLiteStateStore(tmp_path / "state.sqlite3"))
    store.update_fields(scratch=True)

    store.replace(default_app_state())
    assert "scratch" not in store.read()


def test_run_migrations_is_pure_and_stamps_version() -> None:
    source = {"settings": {}}
    out = run_migrations(source, 1)

    assert source == {"settings": {}}
    assert out["version"] == DATA_VERSION
    assert out["customThemes"] == []


def test_run_migrations_missing_step_raises() -> None:
    with pytest.raises(LookupError):
        run_migrations({}, 1, target_version=3, steps={1: lambda d: d})
