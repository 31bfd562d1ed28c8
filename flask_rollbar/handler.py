"""
The log handler: level filter, person enrichment, forward to the client.
"""

from typing import Any, Mapping, Optional

from .levels import is_enabled, parse_threshold
from .person import PersonFn, SessionSource, merge_context


class RollbarLogHandler:
    """Receives every log call and decides whether and how to forward it.

    Args:
        client: The reporting client (anything with ``log(level, message, context)``).
        session: Optional session collaborator used for person enrichment.
        level: Threshold name, ``"none"`` or ``"all"``/``None``.
        person_fn: Optional zero-argument callable returning person fields.

    Raises:
        InvalidLevelError: If *level* is not a known threshold.
    """

    def __init__(
        self,
        client,
        session: Optional[SessionSource] = None,
        level: Optional[str] = None,
        person_fn: Optional[PersonFn] = None,
    ):
        self.client = client
        self.session = session
        self.person_fn = person_fn
        self.threshold = parse_threshold(level)

    def log(self, level: str, message: Any, context: Optional[Mapping[str, Any]] = None):
        """Forward one record unless it is below the threshold.

        Records below the threshold are dropped before the session or
        ``person_fn`` is touched.  Client errors propagate.
        """
        if not is_enabled(level, self.threshold):
            return None
        payload = merge_context(context, self.session, self.person_fn)
        return self.client.log(level, message, payload)

    # ── Per-level shortcuts ──────────────────────────────────────

    def debug(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("debug", message, context)

    def info(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("info", message, context)

    def notice(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("notice", message, context)

    def warning(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("warning", message, context)

    def error(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("error", message, context)

    def critical(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("critical", message, context)

    def alert(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("alert", message, context)

    def emergency(self, message: Any, context: Optional[Mapping[str, Any]] = None):
        return self.log("emergency", message, context)
