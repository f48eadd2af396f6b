"""Tests for duration string parsing."""

import pytest
from structlog.testing import capture_logs

from latchkey.core.durations import DEFAULT_DURATION_SECONDS, parse_duration_seconds


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("900", 900),
        ("30s", 30),
        ("15m", 900),
        ("2h", 7200),
        ("7d", 604800),
        (" 15M ", 900),
        ("0", 1),
        ("-5", 1),
    ],
)
def test_parse_valid_durations(value: str, expected: int) -> None:
    assert parse_duration_seconds(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "15x", "1.5h", "007", "15 m", "m15"])
def test_unparsable_durations_fall_back_to_default(value: str) -> None:
    """Bad values never raise; they fall back to fifteen minutes."""
    assert parse_duration_seconds(value, "jwt_access_expires_in") == DEFAULT_DURATION_SECONDS


def test_default_is_fifteen_minutes() -> None:
    assert DEFAULT_DURATION_SECONDS == 900


def test_fallback_warns_with_rejected_value():
    with capture_logs() as logs:
        assert parse_duration_seconds("15x", "jwt_reset_expires_in") == DEFAULT_DURATION_SECONDS

    assert logs == [
        {
            "event": "Unparsable duration, using default",
            "log_level": "warning",
            "setting": "jwt_reset_expires_in",
            "value": "15x",
            "default_seconds": DEFAULT_DURATION_SECONDS,
        }
    ]


def test_valid_duration_does_not_warn():
    with capture_logs() as logs:
        parse_duration_seconds("7d", "jwt_refresh_expires_in")

    assert logs == []
