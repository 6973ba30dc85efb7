"""Tests for the pagination cursor codec."""

import base64
import uuid
from datetime import datetime, timezone

import pytest

from sleep_tracker.errors import CursorDecodeError
from sleep_tracker.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    Cursor,
    decode_cursor,
    encode_cursor,
    normalize_limit,
)


def test_cursor_round_trip():
    """Decoding an encoded cursor gives back the same position."""
    cursor = Cursor(
        id=uuid.UUID("6f1c2d3e-4b5a-4c6d-8e7f-9a0b1c2d3e4f"),
        start_at=datetime(2024, 1, 15, 23, 0, 0, 123456, tzinfo=timezone.utc),
    )
    token = encode_cursor(cursor)

    assert token == cursor.encode()
    assert decode_cursor(token) == cursor


def test_cursor_is_url_safe():
    cursor = Cursor(id=uuid.uuid4(), start_at=datetime(2024, 5, 1, 6, 30, tzinfo=timezone.utc))
    token = encode_cursor(cursor)
    assert "+" not in token and "/" not in token


@pytest.mark.parametrize("token", ["", None])
def test_empty_cursor_means_first_page(token):
    assert decode_cursor(token) is None


@pytest.mark.parametrize(
    "token",
    [
        "not-a-cursor!!",
        base64.urlsafe_b64encode(b"not json").decode(),
        base64.urlsafe_b64encode(b'{"id": "nope", "start_at": "2024-01-01T00:00:00+00:00"}').decode(),
        base64.urlsafe_b64encode(b'{"id": "6f1c2d3e-4b5a-4c6d-8e7f-9a0b1c2d3e4f"}').decode(),
        base64.urlsafe_b64encode(b'{"id": 7, "start_at": "yesterday"}').decode(),
        base64.urlsafe_b64encode(b"[1, 2]").decode(),
    ],
)
def test_garbage_cursor_raises(token):
    """Anything that is not an encoded cursor is a decode error."""
    with pytest.raises(CursorDecodeError) as exc_info:
        decode_cursor(token)
    assert exc_info.value.field == "cursor"
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize(
    "requested, expected",
    [
        (None, DEFAULT_LIMIT),
        (0, DEFAULT_LIMIT),
        (-5, DEFAULT_LIMIT),
        (1, 1),
        (50, 50),
        (MAX_LIMIT, MAX_LIMIT),
        (1000, MAX_LIMIT),
    ],
)
def test_normalize_limit(requested, expected):
    assert normalize_limit(requested) == expected
