"""
Logging setup for the monitor's worker threads:
  - stderr: colored console lines tagged with the emitting thread
  - file (always): debug log at <log_dir>/run_YYYYMMDD_HHMMSS.log
  - file (optional): one JSON object per line
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from datetime import datetime, timezone

_ANSI = {
    "reset": "\033[0m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bold_red": "\033[1;31m",
}

# levelno -> (ansi color key, 3-letter tag)
_LEVELS = {
    logging.DEBUG: ("dim", "DBG"),
    logging.INFO: ("cyan", "INF"),
    logging.WARNING: ("yellow", "WRN"),
    logging.ERROR: ("red", "ERR"),
    logging.CRITICAL: ("bold_red", "CRT"),
}

DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs")

# Threads whose lines are worth tagging on the console
_THREAD_TAGS = {
    "snapshot-poll": "poll",
    "opportunity-worker": "arb",
    "settlement-sweep": "settle",
    "period-rollover": "roll",
}

_NOISY_LOGGERS = ("httpx", "httpcore", "py_clob_client", "urllib3")


def _color_enabled() -> bool:
    """NO_COLOR wins over FORCE_COLOR; otherwise color only on a tty."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


class ConsoleFormatter(logging.Formatter):
    """Timestamp, level tag and short thread tag, then the message."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self._color = use_color and _color_enabled()

    def _paint(self, key: str, text: str) -> str:
        if not self._color:
            return text
        return f"{_ANSI[key]}{text}{_ANSI['reset']}"

    def format(self, record: logging.LogRecord) -> str:
        color_key, tag = _LEVELS.get(record.levelno, ("reset", "???"))
        parts = [
            self._paint("dim", time.strftime("%H:%M:%S", time.localtime(record.created))),
            self._paint(color_key, tag),
        ]
        thread = _THREAD_TAGS.get(record.threadName or "")
        if thread:
            parts.append(self._paint("green", f"{thread:<6}"))
        parts.append(record.getMessage())
        line = " ".join(parts)

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            line += "\n" + self._paint("red", f"     {type(exc).__name__}: {exc}")
        return line


class JSONFormatter(logging.Formatter):
    """ndjson: ts, level, logger, thread, msg and optionally exception."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["exception"] = repr(exc)
        return json.dumps(entry, separators=(",", ":"))


def setup_logging(
    level: str = "INFO",
    json_log_file: str | None = None,
    log_dir: str = DEFAULT_LOG_DIR,
) -> str:
    """
    Configure the root logger and return the path of the debug log file.

    The console honours *level*; the file always captures DEBUG.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(ConsoleFormatter())
    root.addHandler(console)

    os.makedirs(log_dir, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_path = os.path.join(log_dir, f"run_{stamp}.log")

    debug_file = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    debug_file.setLevel(logging.DEBUG)
    debug_file.setFormatter(logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-8s [%(threadName)s] %(name)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(debug_file)

    if json_log_file:
        json_file = logging.FileHandler(json_log_file, mode="a", encoding="utf-8")
        json_file.setLevel(logging.INFO)
        json_file.setFormatter(JSONFormatter())
        root.addHandler(json_file)

    # Per-request lines from the HTTP stack drown out the 1s poll
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_path
