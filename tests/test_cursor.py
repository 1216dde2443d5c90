import pytest

from datetime import datetime, timedelta, timezone
from ecomm.cursor import Cursor, as_utc, decode_cursor, encode_cursor, from_nanos, to_nanos
from ecomm.error import InvalidCursorError


def test_encode():
    cursor = Cursor(timestamp=0x1746A1B2C3D4E5F, id="41168fa7-ff28-42db-af6b-5542cb235a55")
    assert encode_cursor(cursor) == "1746a1b2c3d4e5f,41168fa7-ff28-42db-af6b-5542cb235a55"


def test_decode():
    cursor = decode_cursor("1746a1b2c3d4e5f,41168fa7-ff28-42db-af6b-5542cb235a55")
    assert cursor.timestamp == 0x1746A1B2C3D4E5F
    assert cursor.id == "41168fa7-ff28-42db-af6b-5542cb235a55"


def test_decode_uppercase_and_signed():
    assert decode_cursor("FF,x").timestamp == 255
    assert decode_cursor("-10,x").timestamp == -16
    assert decode_cursor("+10,x").timestamp == 16


def test_round_trip():
    cursor = Cursor(timestamp=to_nanos(datetime(2021, 3, 4, 5, 6, 7, 890123, timezone.utc)), id="o1")
    assert decode_cursor(encode_cursor(cursor)) == cursor


def test_decode_empty_id():
    assert decode_cursor("1f,") == Cursor(timestamp=31, id="")


@pytest.mark.parametrize(
    "token",
    [
        "not_a_number,not_a_uuid",
        "1746a1b2c3d4e5f",
        "1746a1b2c3d4e5f,a,b",
        ",abc",
        "",
        "0x1f,abc",
        "8000000000000000,abc",  # exceeds int64
    ],
)
def test_decode_invalid(token):
    with pytest.raises(InvalidCursorError) as ei:
        decode_cursor(token)
    assert ei.value.token == token


def test_int64_bounds():
    assert decode_cursor("7fffffffffffffff,a").timestamp == 2**63 - 1
    assert decode_cursor("-8000000000000000,a").timestamp == -(2**63)


def test_nanos():
    dt = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert to_nanos(dt) == 1577836800 * 1_000_000_000
    assert from_nanos(to_nanos(dt)) == dt


def test_nanos_naive_is_utc():
    assert to_nanos(datetime(1970, 1, 1, 0, 0, 1)) == 1_000_000_000


def test_from_nanos_truncates():
    assert from_nanos(1_999) == datetime(1970, 1, 1, 0, 0, 0, 1, timezone.utc)


def test_as_utc():
    assert as_utc(datetime(2020, 1, 1)) == datetime(2020, 1, 1, tzinfo=timezone.utc)
    est = timezone(timedelta(hours=-5))
    assert as_utc(datetime(2020, 1, 1, tzinfo=est)).hour == 5
    assert as_utc(datetime(2020, 1, 1, tzinfo=est)).tzinfo is timezone.utc
