import pytest

from app.domain.exceptions import ValidationError
from app.enums.device import ActuatorStatus
from app.utils.validation import parse_float, validate_history_limit, validate_status


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("23.5", 23.5),
        ("  -4", -4.0),
        ("23.5C", 23.5),
        (".5", 0.5),
        ("1e2", 100.0),
        ("+7.", 7.0),
        ("42abc", 42.0),
    ],
)
def test_parse_float_reads_leading_number(raw, expected):
    assert parse_float(raw) == expected


@pytest.mark.parametrize("raw", ["Infinity", "-Infinity", "1e999", "-2e400C"])
def test_parse_float_drops_non_finite_values(raw):
    assert parse_float(raw) is None


@pytest.mark.parametrize("raw", ["", "abc", "NaN", "nan", "--1", None])
def test_parse_float_without_number_is_none(raw):
    assert parse_float(raw) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 50),
        ("", 50),
        ("abc", 50),
        ("0", 50),
        ("-3", 50),
        ("10", 10),
        ("10abc", 10),
        ("500", 500),
        ("9999", 500),
    ],
)
def test_validate_history_limit(raw, expected):
    assert validate_history_limit(raw) == expected


def test_validate_status_accepts_exact_strings():
    assert validate_status("1") is ActuatorStatus.ON
    assert validate_status("0") is ActuatorStatus.OFF


@pytest.mark.parametrize("value", [1, 0, True, None, "on", " 1", "2", ""])
def test_validate_status_rejects_everything_else(value):
    with pytest.raises(ValidationError, match='Status must be "0" or "1"'):
        validate_status(value)
