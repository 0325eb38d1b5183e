from __future__ import annotations

from datetime import datetime

from bivo.models import parse_datetime, to_iso


def test_parse_plain_date() -> None:
    assert parse_datetime("2025-03-15") == datetime(2025, 3, 15)


def test_parse_day_first_date() -> None:
    assert parse_datetime("15/03/2025") == datetime(2025, 3, 15)


def test_parse_iso_with_zulu_drops_fraction() -> None:
    assert parse_datetime("2025-03-31T23:59:59.900Z") == datetime(2025, 3, 31, 23, 59, 59)


def test_parse_offset_converts_to_utc() -> None:
    assert parse_datetime("2025-03-01T07:00:00+07:00") == datetime(2025, 3, 1, 0, 0, 0)


def test_parse_garbage() -> None:
    assert parse_datetime("soon") is None
    assert parse_datetime("") is None
    assert parse_datetime(None) is None


def test_to_iso() -> None:
    assert to_iso("2025-03-01 00:00:00") == "2025-03-01T00:00:00"
    assert to_iso(None) is None
