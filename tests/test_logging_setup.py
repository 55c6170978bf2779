# tests/test_logging_setup.py

from __future__ import annotations

import logging

from keh_studio.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_quiets_background_monitor() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("keh_studio.core.session", logging.INFO))
    assert not f.filter(_record("keh_studio.notifications.monitor", logging.INFO))
    assert f.filter(_record("keh_studio.notifications.monitor", logging.WARNING))
    assert not f.filter(_record("some.library", logging.WARNING))
