"""
Flask registration: per-app singletons for the client and handler.

Usage::

    app = Flask(__name__)
    app.config["LOGGING"] = {"channels": {"rollbar": {"level": "error"}}}
    Rollbar(app)

    app.logger.error("sync failed")            # via the logging bridge
    get_handler().warning("disk almost full")   # explicit handle
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, current_app
from werkzeug.local import LocalProxy

from .channel import RollbarChannel
from .client import RollbarLogger
from .config import channel_config, load_config, resolve_options, validate_channel_config
from .constants import DEFAULT_CHANNEL, EXTENSION_KEY, LEVEL_NONE_RANK, LEVELS, TOKEN_ENV
from .handler import RollbarLogHandler
from .levels import python_level, register_log_levels
from .logging import get_logger, setup_logger
from .person import FlaskSessionSource, SessionSource

logger = get_logger("extension")


class KeepLevelFilter(logging.Filter):
    """Drop records from one logger that fall below a fixed level.

    Put on the handlers an app logger already fed, so they keep the
    verbosity they had before the channel opened the logger up.
    """

    def __init__(self, logger_name: str, level: int):
        super().__init__()
        self.logger_name = logger_name
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        return record.name != self.logger_name or record.levelno >= self.level


class RollbarState:
    """What ``init_app`` stores at ``app.extensions["rollbar"]``.

    Options are resolved on first access to ``client`` or ``handler`` and
    never again.  ``client`` may be rebound before the handler is first
    built, which is how tests swap in a double.
    """

    def __init__(self, app: Flask, channel: str, session: Optional[SessionSource]):
        self.app = app
        self.channel_name = channel
        self.session = session
        self.channel: Optional[RollbarChannel] = None
        self.level_filters: List[Tuple[logging.Handler, KeepLevelFilter]] = []
        self._options: Optional[Dict[str, Any]] = None
        self._client = None
        self._handler: Optional[RollbarLogHandler] = None
        self._logger_levels: Optional[Tuple[int, int]] = None

    @property
    def options(self) -> Dict[str, Any]:
        if self._options is None:
            self._options = resolve_options(
                self.app.config, self.channel_name, defaults=self._framework_defaults()
            )
        return self._options

    @property
    def client(self):
        if self._client is None:
            self._client = RollbarLogger(self.options)
        return self._client

    @client.setter
    def client(self, value) -> None:
        self._client = value

    @property
    def handler(self) -> RollbarLogHandler:
        if self._handler is None:
            self._handler = RollbarLogHandler(
                self.client,
                session=self.session,
                level=self.options.get("level"),
                person_fn=self.options.get("person_fn"),
            )
            self.settle_logger_level(self._handler.threshold)
        return self._handler

    @handler.setter
    def handler(self, value: RollbarLogHandler) -> None:
        self._handler = value

    # ── App logger level ─────────────────────────────────────────

    def open_logger(self) -> None:
        """Let every record through ``app.logger`` until the threshold is known.

        Handlers the records already reached are filtered back to the
        logger's previous effective level.
        """
        app_logger = self.app.logger
        effective = app_logger.getEffectiveLevel()
        self._logger_levels = (app_logger.level, effective)

        if effective > logging.DEBUG:
            current: Optional[logging.Logger] = app_logger
            while current is not None:
                for h in current.handlers:
                    if h is self.channel:
                        continue
                    level_filter = KeepLevelFilter(app_logger.name, effective)
                    h.addFilter(level_filter)
                    self.level_filters.append((h, level_filter))
                current = current.parent if current.propagate else None

        app_logger.setLevel(logging.DEBUG)

    def settle_logger_level(self, threshold: int) -> None:
        """Narrow ``app.logger`` to what either the channel or its own level needs."""
        if self._logger_levels is None:
            return
        original, effective = self._logger_levels

        if threshold == LEVEL_NONE_RANK or python_level(LEVELS[threshold]) >= effective:
            self.app.logger.setLevel(original)
            self.remove_level_filters()
        else:
            self.app.logger.setLevel(python_level(LEVELS[threshold]))

    def remove_level_filters(self) -> None:
        for h, level_filter in self.level_filters:
            h.removeFilter(level_filter)
        self.level_filters = []

    def _framework_defaults(self) -> Dict[str, Any]:
        return {
            "environment": "development" if self.app.debug else "production",
            "root": self.app.root_path,
        }


class Rollbar:
    """Flask extension that registers the Rollbar log channel.

    ``app.logger`` is set to ``DEBUG`` at registration, because the channel's
    threshold is only read when the handler is first used.  Handlers the
    logger already fed get a ``KeepLevelFilter`` so they stay as quiet as
    before.  Once the threshold is known the logger is narrowed to the
    lower of the threshold and its previous level.  Handlers added to the
    app logger later see records down to the threshold; give them a level.

    Args:
        app: Optional app to initialise immediately.
        channel: Name of the block under ``LOGGING.channels``.
        session: Session collaborator; defaults to ``flask.session``.
        config_file: Optional JSON file merged into ``app.config`` before
            the channel block is read.
    """

    def __init__(
        self,
        app: Optional[Flask] = None,
        channel: str = DEFAULT_CHANNEL,
        session: Optional[SessionSource] = None,
        config_file: Optional[str] = None,
    ):
        self.channel = channel
        self.session = session
        self.config_file = config_file
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> Optional[RollbarState]:
        """Bind the singletons and attach the channel to ``app.logger``.

        Returns:
            The ``RollbarState``, or ``None`` when neither ``ROLLBAR_TOKEN``
            nor a channel block is configured.

        Raises:
            ConfigError: If ``config_file`` is missing or not valid JSON.
        """
        setup_logger(debug=app.debug)
        if self.config_file:
            app.config.update(load_config(self.config_file))
        channel = channel_config(app.config, self.channel)

        if not os.environ.get(TOKEN_ENV) and not channel:
            logger.debug("Rollbar channel '%s' not configured; skipping", self.channel)
            return None

        for problem in validate_channel_config(channel):
            logger.warning("Rollbar channel '%s': %s", self.channel, problem)

        register_log_levels()

        session = self.session if self.session is not None else FlaskSessionSource()
        state = RollbarState(app, self.channel, session)
        app.extensions[EXTENSION_KEY] = state

        state.channel = RollbarChannel(lambda: state.handler)
        app.logger.addHandler(state.channel)
        state.open_logger()

        logger.info("Rollbar channel '%s' registered", self.channel, extra={"channel": self.channel})
        return state

    # ── Explicit handles ─────────────────────────────────────────

    @property
    def client(self):
        return get_client(self.app)

    @property
    def handler(self) -> RollbarLogHandler:
        return get_handler(self.app)


# ── Resolution ───────────────────────────────────────────────────


def get_state(app: Optional[Flask] = None) -> RollbarState:
    """Return the ``RollbarState`` for *app* (default ``current_app``).

    Raises:
        RuntimeError: If the extension is not registered on the app.
    """
    app = app if app is not None else current_app
    state = app.extensions.get(EXTENSION_KEY)
    if state is None:
        raise RuntimeError("Rollbar is not registered on this application; call Rollbar(app) first")
    return state


def get_client(app: Optional[Flask] = None):
    return get_state(app).client


def get_handler(app: Optional[Flask] = None) -> RollbarLogHandler:
    return get_state(app).handler


rollbar_handler: RollbarLogHandler = LocalProxy(get_handler)  # type: ignore[assignment]
