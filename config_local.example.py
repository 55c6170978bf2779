# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for everything else. Only the switches below are read from here.
"""

# Example: keep the feed quiet while demoing
# SYNTHETIC_EVENTS_ENABLED = False

# Example: no terminal bell
# SOUNDS_ENABLED = False
