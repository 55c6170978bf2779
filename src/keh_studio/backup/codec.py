# src/keh_studio/backup/codec.py

"""
Backup / restore of the whole state tree.

A backup is a JSON object: the full state plus a top-level integer
"version". Restoring is all-or-nothing: the document is validated and, if it
is behind, migrated in memory first; only a fully prepared document ever
replaces the current state.
"""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, cast

from ..core.clock import utc_now
from ..core.feedback import FeedbackCenter
from ..core.ports import AppDocument, Clock, Migrator
from ..errors import FutureVersion, KehError, MalformedDocument, MigrationFailure
from ..storage.adapter import StateStoreAdapter
from ..storage.defaults import DATA_VERSION
from ..storage.migrations import run_migrations

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "KEH_Backup"


def backup_filename(prefix: str, now: datetime) -> str:
    """<prefix>_<YYYYMMDD>_<HHMMSS>.json in local wall-clock time."""
    local = now.astimezone() if now.tzinfo is not None else now
    return f"{prefix}_{local:%Y%m%d}_{local:%H%M%S}.json"


def serialize(state: Mapping[str, Any], *, version: int = DATA_VERSION) -> AppDocument:
    doc = copy.deepcopy(dict(state))
    doc["version"] = version
    return doc


def dumps(document: Mapping[str, Any]) -> str:
    """Deterministic text form (stable key order)."""
    return json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True)


def document_version(document: object) -> int:
    if not isinstance(document, Mapping):
        raise MalformedDocument("Invalid backup file. Expected a JSON object.")
    version = document.get("version")
    # bool is an int subclass in Python but never a version number.
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        raise MalformedDocument("Invalid backup file. Version number is missing.")
    if isinstance(version, float) and not version.is_integer():
        raise MalformedDocument(f"Invalid backup file. Version {version!r} is not a whole number.")
    return int(version)


def prepare_restore(
    document: object,
    *,
    current_version: int = DATA_VERSION,
    migrate: Migrator = run_migrations,
) -> AppDocument:
    """
    Validate (and migrate if needed) a backup document.

    Raises MalformedDocument, FutureVersion or MigrationFailure. The input is
    never modified.
    """
    version = document_version(document)
    source = cast(Mapping[str, Any], document)

    if version > current_version:
        raise FutureVersion(version, current_version)

    if version < current_version:
        logger.info("Backup version (%s) is older than current (%s). Migrating...", version, current_version)
        try:
            migrated = migrate(copy.deepcopy(dict(source)), version)
        except Exception as e:
            raise MigrationFailure(
                f"Could not migrate backup from version {version}: {e}",
                details={"from_version": version, "current_version": current_version},
            ) from e
        if not isinstance(migrated, Mapping):
            raise MigrationFailure(f"Migration from version {version} did not return an object.")
        out = dict(migrated)
        out["version"] = current_version
        return out

    return copy.deepcopy(dict(source))


def parse_backup_text(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocument(f"Invalid backup file. Not valid JSON: {e.msg}") from e


@dataclass(frozen=True, slots=True)
class RestoreResult:
    ok: bool
    from_version: int | None = None
    state: AppDocument | None = None
    error: KehError | None = None


class BackupService:
    """Export and restore through the state store, reporting via feedback."""

    def __init__(
        self,
        store: StateStoreAdapter,
        *,
        feedback: FeedbackCenter | None = None,
        migrate: Migrator = run_migrations,
        current_version: int = DATA_VERSION,
        backup_dir: str | Path = ".local/keh/backups",
        prefix: str = DEFAULT_PREFIX,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._feedback = feedback
        self._migrate = migrate
        self._current_version = int(current_version)
        self._backup_dir = Path(backup_dir)
        self._prefix = prefix
        self._clock = clock

    def export(self, directory: str | Path | None = None) -> Path:
        """Write the current state to a timestamped backup file (atomic replace)."""
        target_dir = Path(directory) if directory is not None else self._backup_dir
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            path = target_dir / backup_filename(self._prefix, self._clock())
            document = serialize(self._store.read(), version=self._current_version)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(dumps(document), "utf-8")
            os.replace(tmp, path)
            with contextlib.suppress(Exception):
                # Best-effort: the backup holds the admin PIN; keep it private on disk.
                os.chmod(path, 0o600)
        except Exception as e:
            logger.exception("Backup export failed")
            if self._feedback is not None:
                self._feedback.error(e)
            raise

        logger.info("Backup written to %s", path)
        if self._feedback is not None:
            self._feedback.success("System data backup created successfully.")
        return path

    def restore_document(self, document: object) -> RestoreResult:
        try:
            prepared = prepare_restore(document, current_version=self._current_version, migrate=self._migrate)
        except KehError as e:
            logger.warning("Restore rejected: %s", e.message)
            if self._feedback is not None:
                self._feedback.error(e)
            return RestoreResult(ok=False, error=e)

        from_version = document_version(document)
        committed = self._store.replace(prepared)
        if self._feedback is not None:
            self._feedback.success(f"Data restored successfully from backup version {from_version}.")
        return RestoreResult(ok=True, from_version=from_version, state=committed)

    def restore_text(self, text: str) -> RestoreResult:
        try:
            document = parse_backup_text(text)
        except MalformedDocument as e:
            logger.warning("Restore rejected: %s", e.message)
            if self._feedback is not None:
                self._feedback.error(e)
            return RestoreResult(ok=False, error=e)
        return self.restore_document(document)

    def read_failed(self, path: str | Path, exc: BaseException) -> RestoreResult:
        error = MalformedDocument(f"Failed to read the backup file {Path(path).name}: {exc}")
        logger.warning("Restore rejected: %s", error.message)
        if self._feedback is not None:
            self._feedback.error(error)
        return RestoreResult(ok=False, error=error)

    def restore_file(self, path: str | Path) -> RestoreResult:
        try:
            text = Path(path).read_text("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return self.read_failed(path, e)
        return self.restore_text(text)
