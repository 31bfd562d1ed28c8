"""
Configuration loading, resolution and validation for the Rollbar channel.

The channel block lives inside the Flask config at
``LOGGING.channels.<name>``.  Options are resolved once per app, with
explicit channel values winning over environment variables, which win over
framework and SDK defaults.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from dotenv import load_dotenv
from werkzeug.utils import import_string

from .constants import (
    CONFIG_ROOT_KEY,
    DEFAULT_CHANNEL,
    ENV_OPTIONS,
    LEVEL_ALL,
    LEVEL_NONE,
    LEVELS,
    SDK_DEFAULTS,
)

load_dotenv()


class ConfigError(Exception):
    """Raised when a configuration file is missing or invalid."""


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON file and resolve ``${ENV_VAR:-default}``
    placeholders in all string values.

    Args:
        config_path: Path to the config file.

    Returns:
        Fully-resolved configuration dictionary, suitable for
        ``app.config.update(...)``.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    full_path = Path(config_path)

    if not full_path.exists():
        raise ConfigError(f"Configuration file not found: {full_path}")

    try:
        with open(full_path, "r") as f:
            config = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {full_path}: {exc}") from exc

    return _resolve(config)


# ── Dotted-path access ───────────────────────────────────────────


def get_path(config: Mapping[str, Any], dotted: str, default: Any = None) -> Any:
    """Read ``a.b.c`` out of nested mappings, returning *default* if any hop is missing."""
    node: Any = config
    for part in dotted.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def set_path(config: MutableMapping[str, Any], dotted: str, value: Any) -> None:
    """Write *value* at ``a.b.c``, creating intermediate dicts as needed."""
    parts = dotted.split(".")
    node = config
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, MutableMapping):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def channel_path(channel: str = DEFAULT_CHANNEL) -> str:
    return f"{CONFIG_ROOT_KEY}.channels.{channel}"


def channel_config(config: Mapping[str, Any], channel: str = DEFAULT_CHANNEL) -> Dict[str, Any]:
    """Return a copy of the channel block, or an empty dict when it is absent."""
    block = get_path(config, channel_path(channel))
    return dict(block) if isinstance(block, Mapping) else {}


# ── Resolution ───────────────────────────────────────────────────


def env_options() -> Dict[str, Any]:
    """Options sourced from ``ROLLBAR_*`` environment variables that are set."""
    return {
        option: os.environ[var]
        for var, option in ENV_OPTIONS.items()
        if os.environ.get(var)
    }


def resolve_options(
    config: Mapping[str, Any],
    channel: str = DEFAULT_CHANNEL,
    defaults: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Merge every configuration layer into the flat options dict handed to
    the reporting client.

    Precedence, lowest first: SDK defaults, *defaults* (framework-supplied,
    e.g. ``root``), environment variables, explicit channel config.
    Channel values of ``None`` do not override lower layers.

    Args:
        config: The Flask config (or any mapping with the same shape).
        channel: Name of the channel block under ``LOGGING.channels``.
        defaults: Framework-level defaults.

    Returns:
        The resolved options.  ``person_fn`` given as an import string is
        replaced by the object it names.
    """
    options: Dict[str, Any] = dict(SDK_DEFAULTS)
    options.update(defaults or {})
    options.update(env_options())
    options.update({k: v for k, v in channel_config(config, channel).items() if v is not None})

    person_fn = options.get("person_fn")
    if isinstance(person_fn, str):
        options["person_fn"] = import_string(person_fn)

    return options


def validate_channel_config(channel: Mapping[str, Any]) -> List[str]:
    """
    Validate a channel block.

    Returns:
        A list of human-readable error strings.  Empty means valid.
    """
    errors: List[str] = []

    level = channel.get("level")
    if level is not None:
        valid = set(LEVELS) | {LEVEL_ALL, LEVEL_NONE, ""}
        if not isinstance(level, str) or level.lower() not in valid:
            errors.append(f"Unknown level {level!r}; expected one of {', '.join(LEVELS)}, "
                          f"'{LEVEL_ALL}' or '{LEVEL_NONE}'")

    person_fn = channel.get("person_fn")
    if person_fn is not None and not (callable(person_fn) or isinstance(person_fn, str)):
        errors.append("person_fn must be a callable or an import string")

    token = channel.get("access_token")
    if token is not None and not isinstance(token, str):
        errors.append("access_token must be a string")

    return errors


# ── Private helpers ──────────────────────────────────────────────

_PLACEHOLDER_RE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _resolve(obj: Any) -> Any:
    """Recursively resolve ``${ENV_VAR:-default}`` in string values."""
    if isinstance(obj, str):
        return _PLACEHOLDER_RE.sub(_replace_match, obj)
    elif isinstance(obj, dict):
        return {k: _resolve(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_resolve(v) for v in obj]
    return obj


def _replace_match(m: re.Match) -> str:
    var = m.group(1)
    default = m.group(2) if m.group(2) is not None else ""
    return os.environ.get(var, default)
