"""
Reporting client: the only module that talks to pyrollbar.

pyrollbar keeps one set of settings per process.  Each ``RollbarLogger``
writes its options into those settings when it is built, when it is
reconfigured, and before reporting if another client wrote them last.
"""

import copy
from typing import Any, Dict, Mapping, Optional

import rollbar

from .constants import ADAPTER_OPTIONS
from .levels import sdk_level
from .logging import get_logger

logger = get_logger("client")

# Client whose options pyrollbar currently holds
_active: Optional["RollbarLogger"] = None


class RollbarLogger:
    """Holds the resolved options and forwards reports to pyrollbar.

    Usage::

        client = RollbarLogger({"access_token": "...", "environment": "staging"})
        client.log("error", exc, {"tags": {"job": "sync"}})
    """

    def __init__(self, options: Mapping[str, Any]):
        self._config: Dict[str, Any] = dict(options)
        self._apply(warn=True)
        logger.info(
            "Rollbar client initialised",
            extra={"environment": self._config.get("environment")},
        )

    # ── Options ──────────────────────────────────────────────────

    def extend(self, overrides: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the current options merged with *overrides*, without storing them."""
        merged = copy.copy(self._config)
        merged.update(overrides)
        return merged

    def configure(self, overrides: Mapping[str, Any]) -> None:
        """Merge *overrides* into the current options and push them to pyrollbar."""
        self._config.update(overrides)
        self._apply()

    def sdk_settings(self) -> Dict[str, Any]:
        """The part of the options pyrollbar understands, token included."""
        settings = {k: v for k, v in self._config.items() if k not in ADAPTER_OPTIONS}
        settings["access_token"] = self._config.get("access_token")
        return settings

    def _apply(self, warn: bool = False) -> None:
        global _active
        settings = self.sdk_settings()

        if not rollbar._initialized:
            token = settings.pop("access_token")
            rollbar.init(token, **settings)
        else:
            if warn and _active is not None and _active is not self:
                conflicts = sorted(
                    k for k, v in settings.items()
                    if k in rollbar.SETTINGS and rollbar.SETTINGS[k] != v
                )
                if conflicts:
                    logger.warning(
                        "pyrollbar is already initialised with a different %s; "
                        "settings are switched per report",
                        ", ".join(conflicts),
                    )
            rollbar.SETTINGS = rollbar.lib.dict_merge(rollbar.SETTINGS, settings)

        _active = self

    # ── Reporting ────────────────────────────────────────────────

    def log(self, level: str, message: Any, context: Optional[Mapping[str, Any]] = None):
        """Send one report.

        Args:
            level: One of the eight severity names.
            message: A string, or an exception to report with its traceback.
            context: Extra fields.  ``person`` becomes the payload's person;
                everything else is sent as extra data.

        Returns:
            Whatever pyrollbar returns (the occurrence uuid, or ``None``).
        """
        if _active is not self:
            self._apply()

        extra = dict(context or {})
        person = extra.pop("person", None)
        payload_data = {"person": person} if person else None
        extra_data = extra or None

        if isinstance(message, BaseException):
            exc_info = (type(message), message, message.__traceback__)
            return rollbar.report_exc_info(
                exc_info,
                extra_data=extra_data,
                payload_data=payload_data,
                level=sdk_level(level),
            )

        return rollbar.report_message(
            str(message),
            level=sdk_level(level),
            extra_data=extra_data,
            payload_data=payload_data,
        )
