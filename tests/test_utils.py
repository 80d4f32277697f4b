"""
Time and address helper tests.
"""

from datetime import datetime

import pytest

from utils import (
    parse_scheduled_time,
    format_local_time,
    is_valid_email,
    split_recipients,
    find_invalid_emails,
)


@pytest.mark.parametrize("value, expected", [
    ("2025-01-01T09:00", datetime(2025, 1, 1, 9, 0)),
    ("2025-01-01T09:00:30", datetime(2025, 1, 1, 9, 0, 30)),
    ("2025-01-01 09:00", datetime(2025, 1, 1, 9, 0)),
    ("2025-01-01T09:00+02:00", datetime(2025, 1, 1, 7, 0)),
])
def test_parse_scheduled_time(value, expected):
    assert parse_scheduled_time(value) == expected


def test_parse_scheduled_time_in_timezone():
    # July: Denver is on MDT (UTC-6)
    assert parse_scheduled_time("2025-07-01T09:00", "America/Denver") == datetime(2025, 7, 1, 15, 0)


@pytest.mark.parametrize("value", ["", "   ", None, "tomorrow", "2025-13-01T09:00"])
def test_parse_scheduled_time_rejects(value):
    with pytest.raises(ValueError):
        parse_scheduled_time(value)


def test_format_local_time():
    assert format_local_time(datetime(2025, 1, 1, 16, 0), "America/Denver") == "2025-01-01 09:00"
    assert format_local_time(None) == ""


@pytest.mark.parametrize("email, valid", [
    ("a@x.com", True),
    ("first.last+tag@sub.example.org", True),
    ("not-an-email", False),
    ("a@x", False),
    ("a b@x.com", False),
    ("", False),
    (None, False),
])
def test_is_valid_email(email, valid):
    assert is_valid_email(email) is valid


def test_split_recipients():
    assert split_recipients("b@x.com, c@x.com") == ["b@x.com", "c@x.com"]
    assert split_recipients(" b@x.com ,, b@x.com ") == ["b@x.com", "b@x.com"]
    assert split_recipients(None) == []


def test_find_invalid_emails():
    assert find_invalid_emails(["b@x.com", "nope", "c@x"]) == ["nope", "c@x"]
