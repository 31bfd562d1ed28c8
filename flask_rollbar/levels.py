"""
Severity ranking and the threshold filter.

Records are ranked ``debug`` (0) through ``emergency`` (7).  A threshold is
either one of those names, ``"none"`` (drop everything) or ``"all"`` /
unset (keep everything).
"""

import logging
from typing import Optional

from .constants import LEVEL_ALL, LEVEL_NONE, LEVEL_NONE_RANK, LEVELS, PYTHON_LEVELS, SDK_LEVELS

_RANKS = {name: rank for rank, name in enumerate(LEVELS)}

# Highest first, for mapping arbitrary stdlib numbers back to a name
_BY_PYTHON_LEVEL = sorted(PYTHON_LEVELS.items(), key=lambda item: item[1], reverse=True)


class InvalidLevelError(ValueError):
    """Raised for a level name outside the eight known severities."""


def parse_level(level: str) -> int:
    """Return the rank of *level*.

    Raises:
        InvalidLevelError: If *level* is not a known severity.
    """
    try:
        return _RANKS[str(level).lower()]
    except KeyError:
        raise InvalidLevelError(f"Invalid log level: {level!r}") from None


def parse_threshold(value: Optional[str]) -> int:
    """Return the minimum rank a record needs to pass."""
    if value is None or value == "" or str(value).lower() == LEVEL_ALL:
        return 0
    if str(value).lower() == LEVEL_NONE:
        return LEVEL_NONE_RANK
    return parse_level(value)


def is_enabled(level: str, threshold: int) -> bool:
    return parse_level(level) >= threshold


# ── stdlib / SDK mapping ─────────────────────────────────────────


def register_log_levels() -> None:
    """Give the custom stdlib levels (NOTICE, ALERT, EMERGENCY) their names."""
    for name in ("notice", "alert", "emergency"):
        logging.addLevelName(PYTHON_LEVELS[name], name.upper())


def level_from_python(levelno: int) -> str:
    """Map a stdlib level number to the closest named severity at or below it."""
    for name, number in _BY_PYTHON_LEVEL:
        if levelno >= number:
            return name
    return LEVELS[0]


def python_level(level: str) -> int:
    parse_level(level)
    return PYTHON_LEVELS[str(level).lower()]


def sdk_level(level: str) -> str:
    """Map a severity onto one of pyrollbar's five levels."""
    parse_level(level)
    return SDK_LEVELS[str(level).lower()]
