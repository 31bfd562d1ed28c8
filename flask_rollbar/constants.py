"""
Centralised constants for the flask-rollbar adapter.

Level names, environment variable names and config keys live here so they
can be imported by any module without circular dependencies.
"""

# ── Version ──────────────────────────────────────────────────────
APP_VERSION = "0.1.0"

# ── Levels ───────────────────────────────────────────────────────
# Ordered from least to most severe; the index is the level's rank.
LEVELS = (
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
)

# Threshold sentinels
LEVEL_ALL = "all"
LEVEL_NONE = "none"
LEVEL_NONE_RANK = 1000

# stdlib ``logging`` numbers for each level (NOTICE/ALERT/EMERGENCY are custom)
PYTHON_LEVELS: dict[str, int] = {
    "debug": 10,
    "info": 20,
    "notice": 25,
    "warning": 30,
    "error": 40,
    "critical": 50,
    "alert": 60,
    "emergency": 70,
}

# pyrollbar only knows five levels
SDK_LEVELS: dict[str, str] = {
    "debug": "debug",
    "info": "info",
    "notice": "info",
    "warning": "warning",
    "error": "error",
    "critical": "critical",
    "alert": "critical",
    "emergency": "critical",
}

# ── Configuration ────────────────────────────────────────────────
DEFAULT_CHANNEL = "rollbar"
CONFIG_ROOT_KEY = "LOGGING"
EXTENSION_KEY = "rollbar"

# Environment variable -> option name
ENV_OPTIONS: dict[str, str] = {
    "ROLLBAR_TOKEN": "access_token",
    "ROLLBAR_ENV": "environment",
    "ROLLBAR_LEVEL": "level",
}
TOKEN_ENV = "ROLLBAR_TOKEN"

SDK_DEFAULTS: dict[str, object] = {
    "environment": "production",
}

# Options consumed by the adapter itself and never handed to pyrollbar
ADAPTER_OPTIONS = frozenset({"access_token", "level", "person_fn", "included_errno"})

# ── Logging ──────────────────────────────────────────────────────
LOGGER_NAMESPACE = "flask_rollbar"
SDK_LOGGER_NAMESPACE = "rollbar"
