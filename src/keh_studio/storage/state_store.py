# src/keh_studio/storage/state_store.py

from __future__ import annotations

import contextlib
import copy
import json
import logging
import sqlite3
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..core.ports import AppDocument, Migrator, StateUpdate
from .defaults import DATA_VERSION, default_app_state
from .migrations import run_migrations

logger = logging.getLogger(__name__)


class SQLiteStateStore:
    """
    SQLite-backed persistent store for the application state document.

    The whole tree lives in a single row as JSON. Reads are served from an
    in-memory copy; write() serializes and commits first, then swaps the
    in-memory copy, so a failed write leaves both untouched.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    _ROW_ID = 1

    def __init__(
        self,
        db_path: str | Path = "state.sqlite3",
        *,
        initial_state: Callable[[], AppDocument] = default_app_state,
        migrate: Migrator = run_migrations,
        current_version: int = DATA_VERSION,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initial_state = initial_state
        self._migrate = migrate
        self._current_version = int(current_version)
        self._ensure_schema()
        self._doc: AppDocument = self._load()
        logger.info("SQLiteStateStore ready db=%s version=%s", self._db_path, self._doc.get("version"))

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS app_state (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL,
                    document TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _fetch_row(self) -> tuple[int, str] | None:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT version, document FROM app_state WHERE id = ?", (self._ROW_ID,))
            row = cur.fetchone()
            return (int(row["version"]), str(row["document"])) if row else None
        finally:
            conn.close()

    def _persist(self, doc: AppDocument) -> None:
        payload = json.dumps(doc, ensure_ascii=False)
        version = doc.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            version = self._current_version
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO app_state(id, version, document, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    version = excluded.version,
                    document = excluded.document,
                    updated_at = excluded.updated_at
                """,
                (self._ROW_ID, version, payload, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def _load(self) -> AppDocument:
        row = self._fetch_row()
        if row is None:
            doc = self._initial_state()
            doc["version"] = self._current_version
            self._persist(doc)
            logger.info("Seeded empty state db with defaults (version=%s)", self._current_version)
            return doc

        stored_version, payload = row
        doc = json.loads(payload)
        if not isinstance(doc, dict):
            raise ValueError(f"Stored state in {self._db_path} is not a JSON object")

        if stored_version < self._current_version:
            logger.info("Stored state is version %s; migrating to %s", stored_version, self._current_version)
            doc = self._migrate(doc, stored_version)
            self._persist(doc)
        return doc

    # ---- public API ----

    def read(self) -> AppDocument:
        return copy.deepcopy(self._doc)

    def write(self, update: StateUpdate) -> AppDocument:
        if callable(update):
            new_doc = update(copy.deepcopy(self._doc))
        else:
            new_doc = copy.deepcopy(update)
        if not isinstance(new_doc, dict):
            raise TypeError(f"State update must produce a dict, got {type(new_doc).__name__}")

        self._persist(new_doc)
        self._doc = new_doc
        return copy.deepcopy(new_doc)

    def reload(self) -> AppDocument:
        self._doc = self._load()
        logger.debug("State reloaded from %s", self._db_path)
        return copy.deepcopy(self._doc)
