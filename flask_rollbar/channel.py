"""
stdlib ``logging`` bridge: turns records logged on ``app.logger`` into
``RollbarLogHandler.log`` calls.

Pass per-call context with ``extra``::

    app.logger.error("sync failed", extra={"context": {"tags": {"job": "sync"}}})
    app.logger.error(exc, extra={"context": {"foo": "bar"}})
"""

import logging
from typing import Any, Callable, Dict

from .constants import LOGGER_NAMESPACE, SDK_LOGGER_NAMESPACE
from .levels import level_from_python

# Loggers whose records must never be re-reported
_IGNORED_PREFIXES = (LOGGER_NAMESPACE, SDK_LOGGER_NAMESPACE)


class RollbarChannel(logging.Handler):
    """Logging handler that forwards records to the Rollbar log handler.

    Args:
        resolve: Zero-argument callable returning the ``RollbarLogHandler``.
            Called per record, so the handler is built on first use.
    """

    def __init__(self, resolve: Callable[[], Any], level: int = logging.NOTSET):
        super().__init__(level)
        self._resolve = resolve

    def emit(self, record: logging.LogRecord) -> None:
        if _is_ignored(record.name):
            return
        try:
            level = level_from_python(record.levelno)
            message, context = _unpack(record)
            self._resolve().log(level, message, context)
        except Exception:
            self.handleError(record)


def _is_ignored(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in _IGNORED_PREFIXES)


def _unpack(record: logging.LogRecord) -> tuple[Any, Dict[str, Any]]:
    """Return ``(message, context)`` for *record*.

    An exception passed as the message is reported as-is.  An exception
    attached through ``exc_info`` becomes the message, and the formatted
    text is kept under ``log_message``.
    """
    context = dict(getattr(record, "context", None) or {})

    if isinstance(record.msg, BaseException):
        return record.msg, context

    if record.exc_info and record.exc_info[1] is not None:
        context.setdefault("log_message", record.getMessage())
        return record.exc_info[1], context

    return record.getMessage(), context
