# src/keh_studio/preferences/themes.py

"""Built-in theme baselines (one per theme mode)."""

from __future__ import annotations

import copy
from typing import Any

# Sections a theme owns. Everything else in settings (adminPin,
# userPreferences, ...) is never touched by a theme.
THEME_SECTIONS: tuple[str, ...] = ("themeMode", "colors", "typography", "layout", "motion", "branding")

_SHARED_TYPOGRAPHY: dict[str, Any] = {
    "applicationFont": "Inter, sans-serif",
    "headingFont": "Poppins, sans-serif",
    "baseFontSize": 16,
}

_SHARED_MOTION: dict[str, Any] = {
    "enableAnimations": True,
    "animationDuration": 0.5,
    "transitionSpeed": 0.3,
    "transitionEasing": "cubic-bezier(0.4, 0, 0.2, 1)",
    "defaultEntryAnimation": "fadeIn",
    "smoothScrolling": True,
    "cardHoverEffect": "lift",
    "buttonHoverEffect": "glow",
}

DEFAULT_DARK_THEME: dict[str, Any] = {
    "themeMode": "dark",
    "colors": {
        "primaryAccent": "#3b82f6",
        "background": "#0f172a",
        "card": "#1e293b",
        "primaryText": "#f1f5f9",
        "secondaryText": "#94a3b8",
        "borderColor": "#334155",
        "success": "#22c55e",
        "warning": "#f59e0b",
        "error": "#ef4444",
    },
    "typography": dict(_SHARED_TYPOGRAPHY),
    "layout": {
        "borderRadius": 12,
        "glassIntensity": 15,
        "density": "comfortable",
    },
    "motion": dict(_SHARED_MOTION),
    "branding": {
        "appName": "KEH Studio",
        "logoUrl": "",
        "appBackgroundUrl": "",
    },
}

DEFAULT_LIGHT_THEME: dict[str, Any] = {
    "themeMode": "light",
    "colors": {
        "primaryAccent": "#2563eb",
        "background": "#f8fafc",
        "card": "#ffffff",
        "primaryText": "#0f172a",
        "secondaryText": "#475569",
        "borderColor": "#e2e8f0",
        "success": "#16a34a",
        "warning": "#d97706",
        "error": "#dc2626",
    },
    "typography": dict(_SHARED_TYPOGRAPHY),
    "layout": {
        "borderRadius": 12,
        "glassIntensity": 10,
        "density": "comfortable",
    },
    "motion": dict(_SHARED_MOTION),
    "branding": {
        "appName": "KEH Studio",
        "logoUrl": "",
        "appBackgroundUrl": "",
    },
}

THEME_BASELINES: dict[str, dict[str, Any]] = {
    "dark": DEFAULT_DARK_THEME,
    "light": DEFAULT_LIGHT_THEME,
}


def baseline_for(theme_mode: object) -> dict[str, Any] | None:
    """Return a copy of the baseline for `theme_mode`, or None for unknown modes."""
    if not isinstance(theme_mode, str):
        return None
    base = THEME_BASELINES.get(theme_mode)
    return copy.deepcopy(base) if base is not None else None
