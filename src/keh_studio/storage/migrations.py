# src/keh_studio/storage/migrations.py

"""
Schema migrations for the persisted state document.

Each step upgrades exactly one version (N -> N+1). run_migrations applies the
steps in order and stamps the resulting version. Steps only add or normalize
fields, so running them on an already-current document is a no-op.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .defaults import ADMIN_PIN_UNSET, DATA_VERSION

logger = logging.getLogger(__name__)

MigrationStep = Callable[[dict[str, Any]], dict[str, Any]]


def _v1_to_v2(doc: dict[str, Any]) -> dict[str, Any]:
    # v2 introduced the notification feed, theme presets and the admin PIN.
    doc.setdefault("notifications", [])
    doc.setdefault("customThemes", [])
    settings = doc.get("settings")
    if isinstance(settings, dict):
        settings.setdefault("adminPin", ADMIN_PIN_UNSET)
    return doc


def _v2_to_v3(doc: dict[str, Any]) -> dict[str, Any]:
    # v3 introduced procurement and per-event task lists.
    doc.setdefault("suppliers", [])
    doc.setdefault("procurementDocuments", [])
    events = doc.get("events")
    if isinstance(events, list):
        for event in events:
            if isinstance(event, dict) and not isinstance(event.get("tasks"), list):
                event["tasks"] = []
    return doc


MIGRATIONS: dict[int, MigrationStep] = {
    1: _v1_to_v2,
    2: _v2_to_v3,
}


def run_migrations(
    document: Mapping[str, Any],
    from_version: int,
    *,
    target_version: int = DATA_VERSION,
    steps: Mapping[int, MigrationStep] | None = None,
) -> dict[str, Any]:
    """
    Upgrade `document` from `from_version` to `target_version`.

    The input is never mutated. Raises LookupError if a step is missing.
    """
    steps = MIGRATIONS if steps is None else steps
    doc = copy.deepcopy(dict(document))

    version = int(from_version)
    while version < target_version:
        step = steps.get(version)
        if step is None:
            raise LookupError(f"No migration registered for version {version}")
        doc = step(doc)
        version += 1
        logger.info("Migrated state document to version %s", version)

    doc["version"] = max(version, int(from_version))
    return doc
