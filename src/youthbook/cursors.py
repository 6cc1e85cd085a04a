"""Opaque keyset pagination cursors.

A cursor marks the last item of a page by its sort timestamp and id:

1. ``{"id": "<uuid>", "ts": <microseconds since the Unix epoch>}`` as compact JSON
2. URL-safe base64, padding stripped

Consumers treat the string as opaque; only this module builds or reads it.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from youthbook.errors import InvalidCursor

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ALPHABET = re.compile(r"^[A-Za-z0-9_-]+$")
_PAYLOAD_KEYS = frozenset({"id", "ts"})

# Well above any encoded payload; bounds the work done on hostile input.
MAX_CURSOR_LENGTH = 256


@dataclass(frozen=True)
class PageCursor:
    sort_timestamp: datetime
    id: uuid.UUID


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_microseconds(dt: datetime) -> int:
    delta = as_utc(dt) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def from_microseconds(value: int) -> datetime:
    return _EPOCH + timedelta(microseconds=value)


def encode_cursor(sort_timestamp: datetime, id_: uuid.UUID) -> str:
    payload = json.dumps(
        {"id": str(id_), "ts": to_microseconds(sort_timestamp)},
        separators=(",", ":"),
        sort_keys=True,
    )
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> PageCursor:
    """Decode a cursor string.

    Raises:
        InvalidCursor: for any input that ``encode_cursor`` could not have produced.
    """
    if not isinstance(cursor, str) or not cursor:
        raise InvalidCursor("empty")
    if len(cursor) > MAX_CURSOR_LENGTH:
        raise InvalidCursor("too_long")
    if not _ALPHABET.match(cursor):
        raise InvalidCursor("not_base64")

    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError) as exc:
        raise InvalidCursor("not_base64") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise InvalidCursor("not_json") from exc

    if not isinstance(payload, dict) or set(payload) != _PAYLOAD_KEYS:
        raise InvalidCursor("bad_shape")

    ts = payload["ts"]
    # bool is an int subclass; reject it explicitly.
    if not isinstance(ts, int) or isinstance(ts, bool):
        raise InvalidCursor("bad_timestamp")
    try:
        sort_timestamp = from_microseconds(ts)
    except OverflowError as exc:
        raise InvalidCursor("bad_timestamp") from exc

    raw_id = payload["id"]
    if not isinstance(raw_id, str):
        raise InvalidCursor("bad_id")
    try:
        id_ = uuid.UUID(raw_id)
    except ValueError as exc:
        raise InvalidCursor("bad_id") from exc

    return PageCursor(sort_timestamp=sort_timestamp, id=id_)


__all__ = [
    "MAX_CURSOR_LENGTH",
    "PageCursor",
    "as_utc",
    "decode_cursor",
    "encode_cursor",
]
