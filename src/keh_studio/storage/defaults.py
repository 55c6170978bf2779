# src/keh_studio/storage/defaults.py

from __future__ import annotations

import copy
from typing import Any

from ..preferences.themes import DEFAULT_DARK_THEME

# Bump together with a new step in migrations.MIGRATIONS.
DATA_VERSION = 3

# Sentinel for "no PIN configured"; the configured default PIN applies.
ADMIN_PIN_UNSET: None = None

DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, bool]] = {
    "Admin": {
        "canManageUsers": True,
        "canManageServices": True,
        "canViewFinancials": True,
        "canManageSettings": True,
        "canCreateEvents": True,
    },
    "Sales": {
        "canManageUsers": False,
        "canManageServices": False,
        "canViewFinancials": False,
        "canManageSettings": False,
        "canCreateEvents": True,
    },
    "Operations": {
        "canManageUsers": False,
        "canManageServices": True,
        "canViewFinancials": False,
        "canManageSettings": False,
        "canCreateEvents": True,
    },
}

DEFAULT_SETTINGS: dict[str, Any] = {
    **copy.deepcopy(DEFAULT_DARK_THEME),
    "adminPin": ADMIN_PIN_UNSET,
    "userPreferences": {
        "defaultView": "Home",
    },
}

DEFAULT_APP_STATE: dict[str, Any] = {
    "version": DATA_VERSION,
    "currentUserId": "u1",
    "isLoggedIn": False,
    "settings": DEFAULT_SETTINGS,
    "notifications": [],
    "customThemes": [],
    "users": [
        {"userId": "u1", "name": "Admin User", "role": "Admin"},
        {"userId": "u2", "name": "Sales Rep", "role": "Sales"},
    ],
    "roles": copy.deepcopy(DEFAULT_ROLE_PERMISSIONS),
    "events": [],
    "services": [],
    "clients": [],
    "rfqs": [],
    "quotationTemplates": [],
    "proposalTemplates": [],
    "suppliers": [],
    "procurementDocuments": [],
}


def default_app_state() -> dict[str, Any]:
    """A fresh, independent copy of the default state tree."""
    return copy.deepcopy(DEFAULT_APP_STATE)
