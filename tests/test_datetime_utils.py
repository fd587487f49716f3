from datetime import datetime, timedelta, timezone

from datetime_utils import ensure_utc, from_epoch_ms, parse_rfc3339, to_rfc3339_utc


def test_parse_rfc3339_zulu_and_offsets():
    assert parse_rfc3339("2024-01-01T12:00:00Z") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    assert parse_rfc3339("2024-01-01T14:00:00.5+02:00") == datetime(
        2024, 1, 1, 12, 0, 0, 500000, tzinfo=timezone.utc
    )
    assert parse_rfc3339("") is None
    assert parse_rfc3339("not a date") is None


def test_to_rfc3339_precision():
    moment = datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
    assert to_rfc3339_utc(moment) == "2024-01-01T12:00:00Z"
    assert to_rfc3339_utc(moment, millis=True) == "2024-01-01T12:00:00.123Z"
    assert to_rfc3339_utc(None) is None


def test_ensure_utc_converts_offsets():
    naive = datetime(2024, 1, 1, 12)
    assert ensure_utc(naive).tzinfo is timezone.utc
    shifted = datetime(2024, 1, 1, 14, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(shifted) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def test_from_epoch_ms():
    assert from_epoch_ms(1704110400000) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def test_parse_rfc3339_rejects_non_strings():
    assert parse_rfc3339({"x": 1}) is None
    assert parse_rfc3339(1704110400000) is None
