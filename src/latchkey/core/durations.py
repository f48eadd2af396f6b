"""Human-readable duration parsing for token lifetimes.

Accepts a bare number of seconds ("900") or a number with a single unit
suffix: s, m, h or d ("15m", "7d"). Anything else falls back to
``DEFAULT_DURATION_SECONDS`` so that a typo in configuration never stops the
service from starting; the fallback is logged as a warning.
"""

import re

from latchkey.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DURATION_SECONDS = 900

_DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")

_UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
}


def _parse_canonical_int(value: str) -> int | None:
    # "007" and "+5" are not canonical and fall through to the unit pattern
    try:
        number = int(value)
    except ValueError:
        return None
    if str(number) != value:
        return None
    return number


def parse_duration_seconds(value: str, setting_name: str | None = None) -> int:
    """Parse a duration string into a number of seconds.

    Args:
        value: Duration such as "900", "15m" or "7d".
        setting_name: Name of the setting being parsed, used in the warning.

    Returns:
        Number of seconds. Bare integers are clamped to at least 1.

    Example:
        >>> parse_duration_seconds("15m")
        900
        >>> parse_duration_seconds("7d")
        604800
    """
    normalized = value.strip().lower()

    direct = _parse_canonical_int(normalized)
    if direct is not None:
        return max(direct, 1)

    matched = _DURATION_PATTERN.match(normalized)
    if not matched:
        logger.warning(
            "Unparsable duration, using default",
            setting=setting_name,
            value=value,
            default_seconds=DEFAULT_DURATION_SECONDS,
        )
        return DEFAULT_DURATION_SECONDS

    amount, unit = matched.groups()
    return int(amount) * _UNIT_SECONDS[unit]
