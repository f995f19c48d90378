from datetime import datetime, timedelta, timezone

from app.utils.time import coerce_datetime, iso_now, sqlite_timestamp, to_iso, utc_now


def test_coerce_datetime_parses_z_suffix():
    dt = coerce_datetime("2026-01-01T00:00:00Z")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.isoformat().endswith("+00:00")


def test_coerce_datetime_parses_offset():
    dt = coerce_datetime("2026-01-01T02:00:00+02:00")
    assert dt is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.hour == 0


def test_coerce_datetime_parses_naive_as_utc():
    dt = coerce_datetime("2026-01-01T00:00:00")
    assert dt is not None
    assert dt.utcoffset() == timedelta(0)

    time_diff = utc_now() - dt
    assert isinstance(time_diff, timedelta)


def test_coerce_datetime_rejects_garbage():
    assert coerce_datetime("not a date") is None
    assert coerce_datetime(42) is None
    assert coerce_datetime(None) is None


def test_sqlite_timestamp_is_utc_and_sortable():
    local = datetime(2026, 3, 1, 12, 30, 0, tzinfo=timezone(timedelta(hours=2)))
    assert sqlite_timestamp(local) == "2026-03-01 10:30:00.000000"
    assert sqlite_timestamp(datetime(2026, 3, 1, 9, 0)) < sqlite_timestamp(local)


def test_to_iso_renders_stored_text_timestamps():
    assert to_iso("2026-03-01 10:30:00.000000") == "2026-03-01T10:30:00+00:00"
    assert to_iso(None) is None


def test_iso_now_carries_utc_offset():
    assert iso_now().endswith("+00:00")
