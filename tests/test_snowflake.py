from datetime import timezone

import pytest

from vellum.codec import decode_timestamp, format_size, parse_snowflake, snowflake_to_datetime


def test_format_size_thresholds():
    assert format_size(0) == "0 B"
    assert format_size(500) == "500 B"
    assert format_size(999) == "999 B"
    assert format_size(1000) == "1.00 KiB"
    assert format_size(2048) == "2.05 KiB"
    assert format_size(1000000) == "1.00 MiB"
    assert format_size(1073741824) == "1.00 GiB"


def test_format_size_keeps_mixed_bases():
    # between 1e9 and 1024**3 the decimal MiB divisor still applies
    assert format_size(1000000000) == "1000.00 MiB"
    assert format_size(1073741823) == "1073.74 MiB"
    assert format_size(2 * 1073741824) == "2.00 GiB"


def test_epoch_snowflake():
    assert decode_timestamp(0, timezone.utc) == "Thu, 01 Jan 2015 00:00:00 +0000"


def test_known_snowflake():
    moment = snowflake_to_datetime(175928847299117063, timezone.utc)
    assert (moment.year, moment.month, moment.day) == (2016, 4, 30)
    assert decode_timestamp(175928847299117063, timezone.utc) == "Sat, 30 Apr 2016 11:18:25 +0000"


def test_low_bits_are_ignored():
    base = 175928847299117063 >> 22 << 22
    assert decode_timestamp(base, timezone.utc) == decode_timestamp(base | 0x3FFFFF, timezone.utc)


def test_local_time_is_default():
    moment = snowflake_to_datetime(0)
    assert moment.tzinfo is not None
    assert moment.astimezone(timezone.utc) == snowflake_to_datetime(0, timezone.utc)


def test_parse_snowflake_bounds():
    assert parse_snowflake("0") == 0
    assert parse_snowflake(str(2 ** 64 - 1)) == 2 ** 64 - 1
    for bad in (str(2 ** 64), "9" * 30, "-1", "", "\u00b2", "12a"):
        with pytest.raises(ValueError):
            parse_snowflake(bad)
