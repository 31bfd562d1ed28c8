"""
flask-rollbar - Rollbar error tracking for Flask's logging pipeline
"""

__version__ = "0.1.0"

from .client import RollbarLogger
from .config import ConfigError, load_config, resolve_options
from .extension import Rollbar, RollbarState, get_client, get_handler, rollbar_handler
from .handler import RollbarLogHandler
from .levels import InvalidLevelError
from .person import FlaskSessionSource

__all__ = [
    "Rollbar",
    "RollbarState",
    "RollbarLogger",
    "RollbarLogHandler",
    "FlaskSessionSource",
    "get_client",
    "get_handler",
    "rollbar_handler",
    "load_config",
    "resolve_options",
    "ConfigError",
    "InvalidLevelError",
]
