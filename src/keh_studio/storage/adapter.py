# src/keh_studio/storage/adapter.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from ..core.ports import AppDocument, PersistentStore

logger = logging.getLogger(__name__)


class StateStoreAdapter:
    """
    The single mutation primitive every component goes through.

    Nothing outside this class touches the state tree: callers get copies from
    read() and submit changes as functions of the latest committed state.
    A mutation either commits completely or raises and commits nothing.
    """

    def __init__(self, store: PersistentStore) -> None:
        self._store = store
        self._lock = threading.RLock()

    def read(self) -> AppDocument:
        return self._store.read()

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.read().get(key, default)

    def mutate(self, fn: Callable[[AppDocument], AppDocument]) -> AppDocument:
        """Apply `fn` to the latest committed state and commit its result."""
        with self._lock:
            return self._store.write(fn)

    def update_fields(self, **fields: Any) -> AppDocument:
        """Shallow top-level update, e.g. update_fields(currentUserId="u2")."""
        return self.mutate(lambda doc: {**doc, **fields})

    def replace(self, document: AppDocument) -> AppDocument:
        """Full replacement of the tree (restore). Nothing is merged."""
        with self._lock:
            committed = self._store.write(dict(document))
        logger.info("State replaced (version=%s)", committed.get("version"))
        return committed

    def reload(self) -> AppDocument:
        with self._lock:
            return self._store.reload()
