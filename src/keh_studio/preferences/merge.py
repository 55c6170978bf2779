# src/keh_studio/preferences/merge.py

"""
Deep merge for the settings tree.

Rules (overlay = the side that wins):
- mapping onto mapping -> merged key-by-key, recursively
- anything else (scalar, list, None, mapping onto scalar) -> overlay replaces base
- keys only present in base survive untouched

Both inputs are left unmodified; the result shares no structure with them.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from .themes import baseline_for


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = out.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            out[key] = deep_merge(current, value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def reconcile_settings(current: Mapping[str, Any], partial: object) -> dict[str, Any]:
    """
    Compute the settings that result from applying `partial` to `current`.

    A theme-mode change first lays the target mode's baseline over the current
    settings, so uncustomized keys pick up the new palette, and only then
    applies the partial itself.
    """
    if not isinstance(partial, Mapping):
        return copy.deepcopy(dict(current))

    target_mode = partial.get("themeMode")
    if target_mode is not None and target_mode != current.get("themeMode"):
        baseline = baseline_for(target_mode)
        if baseline is not None:
            return deep_merge(deep_merge(current, baseline), partial)

    return deep_merge(current, partial)
