"""Centralized logging for kubedeploy."""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_lock = threading.Lock()
_setup_done = False
_console_handler: logging.Handler | None = None

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_COLORS = {
    logging.DEBUG: "\033[0;36m",
    logging.INFO: "\033[0;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
}
_RESET = "\033[0m"


class _StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


class _Formatter(logging.Formatter):
    """Format log records as ``[time] LEVEL [tag] message``.

    The ``kubedeploy.`` prefix is stripped from the logger name. With
    *color* enabled the timestamp and level are wrapped in ANSI codes.
    """

    def __init__(self, color: bool = False) -> None:
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith("kubedeploy."):
            name = name[len("kubedeploy.") :]
        # Format a copy so the file and console handlers don't stack tags.
        record = logging.makeLogRecord(record.__dict__)
        record.msg = f"[{name}] {record.msg}"
        line = super().format(record)
        if not self.color:
            return line
        color = _LEVEL_COLORS.get(record.levelno, "")
        prefix, sep, rest = line.partition("[" + name + "]")
        return f"{color}{prefix.rstrip()}{_RESET} {sep}{rest}"


def setup_logging(verbose: bool = False, color: bool = True) -> None:
    """Configure the ``kubedeploy`` root logger (idempotent).

    Attaches a single stderr handler at INFO (or DEBUG when
    *verbose* is True) and sets ``propagate = False``. Repeated calls only
    adjust the level and color of the existing handler.
    """
    global _setup_done, _console_handler
    level = logging.DEBUG if verbose else logging.INFO
    with _lock:
        logger = logging.getLogger("kubedeploy")
        logger.setLevel(level)
        if _setup_done and _console_handler is not None:
            _console_handler.setFormatter(_Formatter(color=color))
            return
        handler = _StderrHandler()
        handler.setFormatter(_Formatter(color=color))
        logger.addHandler(handler)
        logger.propagate = False
        _console_handler = handler
        _setup_done = True


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(f"kubedeploy.{name}")``.

    Lazily calls :func:`setup_logging` on first use so that log output
    is routed to stderr even when callers skip explicit setup.
    """
    if not _setup_done:
        setup_logging()
    return logging.getLogger(f"kubedeploy.{name}")


@contextmanager
def run_log(path: Path) -> Iterator[logging.Handler]:
    """Tee every ``kubedeploy`` record into *path* while the block runs.

    The file is opened lazily, so a run that never logs leaves no file.
    """
    handler = logging.FileHandler(path, delay=True, encoding="utf-8")
    handler.setFormatter(_Formatter(color=False))
    root = logging.getLogger("kubedeploy")
    root.addHandler(handler)
    try:
        yield handler
    finally:
        root.removeHandler(handler)
        handler.close()
