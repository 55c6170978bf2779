# src/keh_studio/preferences/reconciler.py

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from ..core.clock import format_iso, utc_now
from ..core.feedback import FeedbackCenter
from ..core.ports import AppDocument, Clock
from ..storage.adapter import StateStoreAdapter
from .merge import reconcile_settings
from .themes import THEME_SECTIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ThemePreset:
    id: str
    name: str
    settings: dict[str, Any]
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "settings": self.settings,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ThemePreset:
        settings = raw.get("settings")
        return cls(
            id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            settings=settings if isinstance(settings, dict) else {},
            created_at=str(raw.get("createdAt", "")),
        )


@dataclass(slots=True)
class SettingsReconciler:
    """Applies partial settings updates and manages saved theme presets."""

    store: StateStoreAdapter
    feedback: FeedbackCenter | None = None
    clock: Clock = field(default=utc_now)

    def current(self) -> dict[str, Any]:
        settings = self.store.get("settings")
        return settings if isinstance(settings, dict) else {}

    def update(self, partial: object, *, acknowledge: bool = True) -> dict[str, Any]:
        def _apply(doc: AppDocument) -> AppDocument:
            current = doc.get("settings")
            merged = reconcile_settings(current if isinstance(current, dict) else {}, partial)
            return {**doc, "settings": merged}

        committed = self.store.mutate(_apply)
        logger.debug("Settings updated keys=%s", sorted(partial) if isinstance(partial, dict) else [])
        if acknowledge and self.feedback is not None:
            self.feedback.success("Settings updated.")
        return committed["settings"]

    # ---- theme presets ----

    def list_themes(self) -> list[ThemePreset]:
        raw = self.store.get("customThemes") or []
        return [ThemePreset.from_dict(t) for t in raw if isinstance(t, dict)]

    def save_theme(self, name: str) -> ThemePreset:
        current = self.current()
        snapshot = {key: current[key] for key in THEME_SECTIONS if key in current}
        now = self.clock()
        preset = ThemePreset(
            id=f"theme-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}",
            name=name,
            settings=snapshot,
            created_at=format_iso(now),
        )
        self.store.mutate(
            lambda doc: {**doc, "customThemes": [*(doc.get("customThemes") or []), preset.to_dict()]}
        )
        logger.info("Theme preset saved id=%s name=%s", preset.id, name)
        if self.feedback is not None:
            self.feedback.success(f'Theme "{name}" saved.')
        return preset

    def delete_theme(self, theme_id: str) -> bool:
        removed = False

        def _apply(doc: AppDocument) -> AppDocument:
            nonlocal removed
            themes = doc.get("customThemes") or []
            kept = [t for t in themes if not (isinstance(t, dict) and t.get("id") == theme_id)]
            removed = len(kept) != len(themes)
            return {**doc, "customThemes": kept}

        self.store.mutate(_apply)
        if removed and self.feedback is not None:
            self.feedback.success("Theme deleted.")
        return removed

    def apply_theme(self, theme_id: str) -> dict[str, Any] | None:
        preset = next((t for t in self.list_themes() if t.id == theme_id), None)
        if preset is None:
            logger.warning("apply_theme: unknown theme id=%s", theme_id)
            return None
        return self.update(preset.settings)
