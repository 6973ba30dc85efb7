"""Timestamp normalisation and local wall-clock rendering.

Instants are always stored in UTC. The zone attached to a session only
decides how those instants are *displayed*; it never moves them. Rendering
tolerates unknown zone names by falling back to UTC while leaving the stored
name untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

import pytz

logger = logging.getLogger(__name__)

DEFAULT_ZONE_NAME = "UTC"


class ZoneDatabase:
    """Resolves IANA zone names to tzinfo objects using the pytz database."""

    def resolve(self, name: str | None) -> tzinfo | None:
        """Return the zone for ``name`` or ``None`` if it is empty or unknown."""
        if not name:
            return None
        try:
            return pytz.timezone(name)
        except (pytz.UnknownTimeZoneError, UnicodeError, ValueError):
            return None


@dataclass(frozen=True)
class NormalizedTimes:
    """UTC instants plus the zone name recorded for rendering."""

    start_at: datetime
    end_at: datetime
    local_timezone: str


def to_utc(value: datetime) -> datetime:
    """Convert ``value`` to an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Elapsed time between two instants, independent of how they are rendered."""
    return to_utc(end) - to_utc(start)


class TimeNormalizer:
    """Normalises incoming timestamps and renders stored instants locally."""

    def __init__(self, zones: ZoneDatabase | None = None) -> None:
        self.zones = zones or ZoneDatabase()

    def is_known_zone(self, name: str | None) -> bool:
        return self.zones.resolve(name) is not None

    def resolve_local_timezone(
        self, requested_zone: str | None, owner_default_zone: str | None
    ) -> str:
        """Pick the zone name to record: requested, then owner default, then UTC."""
        if requested_zone:
            return requested_zone
        if owner_default_zone:
            return owner_default_zone
        return DEFAULT_ZONE_NAME

    def normalize(
        self,
        raw_start: datetime,
        raw_end: datetime,
        requested_zone: str | None,
        owner_default_zone: str | None,
    ) -> NormalizedTimes:
        """Convert both timestamps to UTC and resolve the session's local zone."""
        return NormalizedTimes(
            start_at=to_utc(raw_start),
            end_at=to_utc(raw_end),
            local_timezone=self.resolve_local_timezone(requested_zone, owner_default_zone),
        )

    def to_local(self, instant: datetime, zone_name: str | None) -> datetime:
        """Render ``instant`` as wall-clock time in ``zone_name``.

        Falls back to UTC when the zone is empty or unknown; never raises for a
        bad zone name. The result denotes the same instant as the input, so
        subtracting two rendered values gives the true elapsed time even across
        DST transitions.
        """
        zone = self.zones.resolve(zone_name)
        if zone is None:
            if zone_name:
                logger.debug(f"Unknown timezone {zone_name!r}, rendering in UTC")
            return to_utc(instant)
        return to_utc(instant).astimezone(zone)


_default_normalizer = TimeNormalizer()


def get_time_normalizer() -> TimeNormalizer:
    """Get the shared time normalizer."""
    return _default_normalizer
