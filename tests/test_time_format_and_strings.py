from datetime import datetime

import pytest

from srg_reports.utils.filters import RowFilter
from srg_reports.utils.strings import get_string
from srg_reports.utils.time_format import format_human_time, parse_timestamp


@pytest.mark.parametrize("value, expected", [
    (1700000000, 1700000000),
    ("1700000000", 1700000000),
    (" 42 ", 42),
    (12.9, 12),
    ("", None),
    (None, None),
    ("yesterday", None),
    (True, None),
])
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


def test_format_human_time():
    assert format_human_time(0, "%Y") == datetime.fromtimestamp(0).strftime("%Y")
    assert format_human_time("", "%Y") == ""
    assert format_human_time("n/a", "%Y") == ""


def test_get_string_fallbacks():
    assert get_string("dedication", "es") == "Dedicación"
    assert get_string("dedication", "fr") == "Dedication"
    assert get_string("unknown_key", "es") == "unknown_key"


def test_row_filter_emptiness():
    assert RowFilter.is_empty(None)
    assert RowFilter.is_empty("")
    assert not RowFilter.is_empty(0)
    assert not RowFilter.is_empty("0")


def test_row_filter_matches_across_types():
    allowed = RowFilter.allowed_set([3, "4"])
    assert RowFilter.matches("3", allowed)
    assert RowFilter.matches(4, allowed)
    assert not RowFilter.matches(None, allowed)
