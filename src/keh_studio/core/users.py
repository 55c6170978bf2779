# src/keh_studio/core/users.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import PermissionDenied
from ..storage.adapter import StateStoreAdapter
from ..storage.defaults import DEFAULT_ROLE_PERMISSIONS

logger = logging.getLogger(__name__)

GUEST_USER: dict[str, Any] = {"userId": "guest", "name": "Guest", "role": "Sales"}
IMMUTABLE_ROLES = frozenset({"Admin"})


def find_user(document: Mapping[str, Any], user_id: str) -> dict[str, Any] | None:
    for user in document.get("users") or []:
        if isinstance(user, dict) and user.get("userId") == user_id:
            return user
    return None


def resolve_current_user(document: Mapping[str, Any]) -> dict[str, Any]:
    """
    The active user with effective permissions attached.

    Falls back to the first user when currentUserId is stale, and to a guest
    when there are no users at all. Effective permissions are the built-in
    role defaults overlaid by whatever the roles table stores.
    """
    users = [u for u in document.get("users") or [] if isinstance(u, dict)]
    if not users:
        return {**GUEST_USER, "permissions": {}}

    user = find_user(document, str(document.get("currentUserId", ""))) or users[0]
    role = user.get("role")
    stored = (document.get("roles") or {}).get(role) or {}
    permissions = {**DEFAULT_ROLE_PERMISSIONS.get(str(role), {}), **stored}
    return {**user, "permissions": permissions}


def update_role_permissions(store: StateStoreAdapter, role: str, permissions: Mapping[str, bool]) -> None:
    if role in IMMUTABLE_ROLES:
        raise PermissionDenied(f"{role} role permissions cannot be changed.", details={"role": role})
    store.mutate(lambda doc: {**doc, "roles": {**(doc.get("roles") or {}), role: dict(permissions)}})
    logger.info("Permissions updated for role=%s", role)
