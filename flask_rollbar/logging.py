"""
Diagnostics logging for the adapter itself.

Every logger lives under the ``flask_rollbar`` namespace.  ``setup_logger``
attaches one stderr handler to that namespace: single-line JSON when
``LOG_FORMAT=json``, coloured text otherwise.  Access tokens are redacted
before anything is emitted.
"""

import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .constants import APP_VERSION, LOGGER_NAMESPACE

ADAPTER_NAME = "flask-rollbar"


def get_logger(name: str) -> logging.Logger:
    """Return ``flask_rollbar.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


# ── Token scrubbing ──────────────────────────────────────────────

_TOKEN_RE = re.compile(
    r"(?i)(access_token|post_server_item|token)(\s*[:=]\s*)(['\"]?)([^\s'\"]{4,})\3"
)

_REDACT_ATTRS = frozenset({"access_token", "token"})


class TokenScrubber(logging.Filter):
    """Logging filter that redacts access tokens from records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        msg = record.getMessage()
        record.msg = _scrub_text(msg)
        record.args = None

        for attr in _REDACT_ATTRS:
            if hasattr(record, attr):
                setattr(record, attr, "[REDACTED]")

        return True


def _scrub_text(text: str) -> str:
    return _TOKEN_RE.sub(r"\1\2\3[REDACTED]\3", text)


# ── Formatters ───────────────────────────────────────────────────

# Fields an adapter log call may pass through ``extra``
_CONTEXT_FIELDS = ("channel", "environment")


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: getattr(record, key)
        for key in _CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class _JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "adapter": ADAPTER_NAME,
            "version": APP_VERSION,
        }
        entry.update(_context(record))

        if record.exc_info and record.exc_info[0] is not None:
            entry["error_type"] = record.exc_info[0].__name__
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class _DevFormatter(logging.Formatter):
    """Coloured console lines; the channel name is shown when there is one."""

    # ANSI colours by level number, custom levels included
    _COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[32m",
        25: "\033[36m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
        60: "\033[1;35m",
        70: "\033[1;41m",
    }
    _RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelno, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        channel = getattr(record, "channel", None)
        where = f"{record.name}[{channel}]" if channel else record.name
        line = f"{ts} {color}{record.levelname:<9}{self._RESET} {where}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ── Setup ────────────────────────────────────────────────────────


def setup_logger(level: Optional[int] = None, debug: bool = False) -> logging.Logger:
    """Configure the ``flask_rollbar`` namespace logger.

    Calling it again only updates levels; handlers are never duplicated.

    Args:
        level: Explicit level (overrides *debug*).
        debug: If ``True``, sets level to ``DEBUG``.

    Returns:
        The namespace ``logging.Logger``.
    """
    if level is None:
        level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)

    if logger.handlers:
        for h in logger.handlers:
            h.setLevel(level)
        return logger

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.addFilter(TokenScrubber())

    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        console_handler.setFormatter(_JsonFormatter())
    else:
        console_handler.setFormatter(_DevFormatter())

    logger.addHandler(console_handler)
    return logger
