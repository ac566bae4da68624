from datetime import datetime, timedelta, timezone

import pytest

from imagereflector.duration import (
    format_duration,
    format_timestamp,
    parse_duration,
    parse_timestamp,
)


@pytest.mark.parametrize(
    "left, right",
    [
        ("1.5h", "90m"),
        ("1h30m", "90m"),
        ("1000ms", "1s"),
        ("1500us", "1.5ms"),
        ("1500\u00b5s", "1.5ms"),
        ("+5m", "5m"),
        ("-0", "0"),
        ("5.s", "5s"),
        (".5s", "500ms"),
    ],
)
def test_equivalent_spellings(left, right):
    assert parse_duration(left) == parse_duration(right)


def test_negative_duration():
    assert parse_duration("-1m") == -parse_duration("1m")


def test_zero():
    assert parse_duration("0") == timedelta(0)


@pytest.mark.parametrize("text", ["", "1", "h", "1x", ".s", "-", "1h 2m", "+"])
def test_invalid_durations(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_parse_rejects_non_string():
    with pytest.raises(TypeError):
        parse_duration(30)


def test_overflow_rejected():
    with pytest.raises(ValueError):
        parse_duration("9999999999999h")


def test_format_pinned_values():
    assert format_duration(parse_duration("1h")) == "1h0m0s"
    assert format_duration(timedelta(0)) == "0s"
    assert format_duration(parse_duration("90s")) == "1m30s"


@pytest.mark.parametrize(
    "text", ["1h0m0s", "2m3s", "1.5s", "250ms", "1.5ms", "10s", "3h2m1.25s"]
)
def test_canonical_round_trip(text):
    assert format_duration(parse_duration(text)) == text


def test_format_negative():
    assert format_duration(-parse_duration("2m3s")) == "-" + format_duration(
        parse_duration("2m3s")
    )


@pytest.mark.parametrize(
    "value",
    [
        timedelta(seconds=30),
        timedelta(minutes=10),
        timedelta(hours=26, seconds=1),
        timedelta(microseconds=7),
        timedelta(milliseconds=1234),
        timedelta(seconds=-45),
    ],
)
def test_parse_inverts_format(value):
    assert parse_duration(format_duration(value)) == value


def test_format_rejects_non_timedelta():
    with pytest.raises(TypeError):
        format_duration("1s")


def test_timestamp_round_trip():
    text = "2024-01-02T03:04:05Z"
    assert format_timestamp(parse_timestamp(text)) == text


def test_parse_timestamp_value():
    assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(
        2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc
    )


def test_timestamp_offset_normalised():
    assert parse_timestamp("2024-01-02T05:04:05+02:00") == parse_timestamp(
        "2024-01-02T03:04:05Z"
    )


def test_naive_timestamp_is_utc():
    naive = datetime(2024, 1, 2, 3, 4, 5)
    aware = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert format_timestamp(naive) == format_timestamp(aware)


@pytest.mark.parametrize("text", ["", "yesterday", "2024-01-02T03:04:05"])
def test_invalid_timestamps(text):
    with pytest.raises(ValueError):
        parse_timestamp(text)