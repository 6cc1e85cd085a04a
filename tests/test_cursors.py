from __future__ import annotations

import base64
import json
import re
import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest

from youthbook.cursors import MAX_CURSOR_LENGTH, PageCursor, decode_cursor, encode_cursor
from youthbook.errors import InvalidCursor


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _payload_cursor(payload: object) -> str:
    return _b64(json.dumps(payload).encode("utf-8"))


@pytest.mark.parametrize(
    "sort_timestamp",
    [
        datetime(2026, 1, 1, tzinfo=UTC),
        datetime(2026, 1, 1, 12, 30, 45, 123456, tzinfo=UTC),
        datetime(1970, 1, 1, tzinfo=UTC),
        datetime(1969, 12, 31, 23, 59, 59, 999999, tzinfo=UTC),
        datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=UTC),
        datetime(1, 1, 1, tzinfo=UTC),
    ],
)
def test_decode_reverses_encode(sort_timestamp: datetime) -> None:
    id_ = uuid.uuid4()

    decoded = decode_cursor(encode_cursor(sort_timestamp, id_))

    assert decoded == PageCursor(sort_timestamp=sort_timestamp, id=id_)


def test_naive_and_offset_timestamps_are_read_as_utc() -> None:
    id_ = uuid.uuid4()
    naive = datetime(2026, 5, 4, 3, 2, 1, 7)
    offset = datetime(2026, 5, 4, 5, 2, 1, 7, tzinfo=timezone(timedelta(hours=2)))

    assert encode_cursor(naive, id_) == encode_cursor(offset, id_)
    assert decode_cursor(encode_cursor(naive, id_)).sort_timestamp == naive.replace(tzinfo=UTC)


def test_encoding_is_deterministic_url_safe_and_unpadded() -> None:
    id_ = uuid.UUID("9b2e4c1a-0f3d-4e8a-b7c6-5d4e3f2a1b0c")
    ts = datetime(2026, 2, 3, 4, 5, 6, 789, tzinfo=UTC)

    first = encode_cursor(ts, id_)

    assert first == encode_cursor(ts, id_)
    assert re.fullmatch(r"[A-Za-z0-9_-]+", first)
    assert not first.endswith("=")


def test_payload_carries_microsecond_timestamp_and_id() -> None:
    id_ = uuid.uuid4()
    ts = datetime(1970, 1, 1, 0, 0, 1, 5, tzinfo=UTC)
    cursor = encode_cursor(ts, id_)

    payload = json.loads(base64.urlsafe_b64decode(cursor + "=" * (-len(cursor) % 4)))

    assert payload == {"id": str(id_), "ts": 1_000_005}


@pytest.mark.parametrize(
    "cursor",
    [
        "",
        "not a cursor!",
        "%%%%",
        "abc=",
        "a",
        "é",
        "x" * (MAX_CURSOR_LENGTH + 1),
        _b64(b"plain text, not json"),
        _b64(b"\xff\xfe\xfd"),
        _b64(b"[" * 200),
        _payload_cursor([1, 2]),
        _payload_cursor("just a string"),
        _payload_cursor(None),
        _payload_cursor({}),
        _payload_cursor({"ts": 1}),
        _payload_cursor({"id": str(uuid.uuid4())}),
        _payload_cursor({"ts": 1, "id": str(uuid.uuid4()), "extra": True}),
        _payload_cursor({"ts": "1700000000000000", "id": str(uuid.uuid4())}),
        _payload_cursor({"ts": 1.5, "id": str(uuid.uuid4())}),
        _payload_cursor({"ts": True, "id": str(uuid.uuid4())}),
        _payload_cursor({"ts": None, "id": str(uuid.uuid4())}),
        _payload_cursor({"ts": 10**30, "id": str(uuid.uuid4())}),
        _payload_cursor({"ts": -(10**30), "id": str(uuid.uuid4())}),
        _payload_cursor({"ts": 1, "id": "not-a-uuid"}),
        _payload_cursor({"ts": 1, "id": 12345}),
        _payload_cursor({"ts": 1, "id": None}),
    ],
)
def test_malformed_cursors_raise_invalid_cursor(cursor: str) -> None:
    with pytest.raises(InvalidCursor):
        decode_cursor(cursor)


def test_invalid_cursor_reports_a_reason() -> None:
    with pytest.raises(InvalidCursor) as excinfo:
        decode_cursor(_payload_cursor({"ts": 1, "id": "nope"}))

    assert excinfo.value.reason == "bad_id"
