# tests/test_logging_setup.py

from __future__ import annotations

import logging

from homebase.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_rules() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("homebase.tasks.lifecycle", logging.DEBUG))
    assert not f.filter(_record("homebase.storage.sqlite_store", logging.INFO))
    assert f.filter(_record("homebase.storage.json_blobs", logging.WARNING))
    assert not f.filter(_record("asyncio", logging.WARNING))
    assert f.filter(_record("asyncio", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))


def test_setup_logging_writes_log_file(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
        logging.getLogger("homebase.test").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert log_file.name == "homebase.log"
        assert "hello file" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
