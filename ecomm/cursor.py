"""
Module to encode and decode page cursor tokens.

A page cursor token identifies the last record delivered in a page, so that the next page can
resume immediately after it. Records are always ordered by a sort timestamp and then by a
unique identifier; the token captures both values:

    <lowercase hexadecimal Unix nanoseconds>,<unique identifier>

Example: "1746a1b2c3d4e5f,41168fa7-ff28-42db-af6b-5542cb235a55"

Tokens are handed to clients, so the format must never change; tokens already issued must
remain decodable.

Record timestamps are Python datetimes, which have microsecond resolution. A token whose
timestamp is not a whole number of microseconds, such as one issued by a service that keeps
nanoseconds, is truncated to the earlier microsecond when decoded into a resume position.
"""

import re

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from ecomm.error import InvalidCursorError


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_HEX = re.compile(r"[+-]?[0-9a-fA-F]+")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Cursor:
    """
    Position of the last record delivered in a page.

    Attributes:
    • timestamp: record sort timestamp, in Unix nanoseconds
    • id: record unique identifier
    """

    timestamp: int
    id: str


def as_utc(value: datetime) -> datetime:
    """Return a datetime in UTC. A naive datetime is interpreted as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_nanos(value: datetime) -> int:
    """Return a datetime as Unix nanoseconds. A naive datetime is interpreted as UTC."""
    delta = as_utc(value) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def from_nanos(value: int) -> datetime:
    """
    Return Unix nanoseconds as a UTC datetime. Nanoseconds below microsecond precision are
    discarded, rounding toward the earlier microsecond.
    """
    return _EPOCH + timedelta(microseconds=value // 1_000)


def encode_cursor(cursor: Cursor) -> str:
    """Encode a cursor position as a page token."""
    return f"{cursor.timestamp:x},{cursor.id}"


def decode_cursor(token: str) -> Cursor:
    """
    Decode a page token into a cursor position.

    Raises InvalidCursorError if the token does not consist of exactly two comma-separated
    parts, or if the first part is not a base-16 signed 64-bit integer.
    """
    parts = token.split(",")
    if len(parts) != 2 or not _HEX.fullmatch(parts[0]):
        raise InvalidCursorError(token)
    timestamp = int(parts[0], 16)
    if not _INT64_MIN <= timestamp <= _INT64_MAX:
        raise InvalidCursorError(token)
    return Cursor(timestamp=timestamp, id=parts[1])
