"""Opaque cursors for newest-first pagination of sleep sessions."""

import base64
import binascii
import json
import uuid
from dataclasses import dataclass
from datetime import datetime

from sleep_tracker.errors import CursorDecodeError
from sleep_tracker.services.time_normalizer import to_utc

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class Cursor:
    """Position of the last item of a page under ``start_at DESC, id DESC``."""

    id: uuid.UUID
    start_at: datetime

    def encode(self) -> str:
        payload = {"id": str(self.id), "start_at": to_utc(self.start_at).isoformat()}
        data = json.dumps(payload, separators=(",", ":")).encode()
        return base64.urlsafe_b64encode(data).decode("ascii")


def encode_cursor(cursor: Cursor) -> str:
    return cursor.encode()


def decode_cursor(token: str | None) -> Cursor | None:
    """Decode a cursor token.

    An empty token means "first page" and yields ``None``. Anything that is
    not a token produced by :func:`encode_cursor` raises ``CursorDecodeError``.
    """
    if not token:
        return None

    try:
        data = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
        return Cursor(
            id=uuid.UUID(data["id"]),
            start_at=to_utc(datetime.fromisoformat(data["start_at"])),
        )
    except (binascii.Error, ValueError, KeyError, TypeError, AttributeError) as e:
        raise CursorDecodeError() from e


def normalize_limit(limit: int | None) -> int:
    """Clamp a requested page size to ``[1, MAX_LIMIT]``, defaulting when unset."""
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    if limit > MAX_LIMIT:
        return MAX_LIMIT
    return limit
