# trackplay/model/fix.py

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from trackplay.utils.geo import haversine
from trackplay.utils.validate import FixRecord

# Extended ISO-8601 date-time; the offset is optional and defaults to UTC.
_ISO_INSTANT = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$"
)


@dataclass(frozen=True)
class Fix:
    """
    One timestamped geographic position.

    Parameters
    ----------
    timestamp : datetime
        Timezone-aware instant of the fix.
    latitude : float
        Latitude in decimal degrees.
    longitude : float
        Longitude in decimal degrees.
    speed : float
        Speed in km/h. Stored fixes keep 0.0; emitted copies carry the
        value computed against the previous fix.
    """
    timestamp: datetime
    latitude: float
    longitude: float
    speed: float = 0.0

    @property
    def coordinate(self) -> Tuple[float, float]:
        return self.latitude, self.longitude

    def with_speed(self, speed: float) -> Fix:
        return replace(self, speed=speed)

    def to_record(self) -> FixRecord:
        return FixRecord(
            timestamp=self.timestamp,
            latitude=self.latitude,
            longitude=self.longitude,
            speed=self.speed,
        )

    @classmethod
    def from_raw(cls, record: Any) -> Optional[Fix]:
        """
        Build a fix from a raw feed record `[timestamp, longitude, latitude]`.

        Returns None if the record is malformed.
        """
        if not isinstance(record, (list, tuple)) or len(record) != 3:
            return None
        timestamp = parse_timestamp(record[0])
        if timestamp is None:
            return None
        longitude, latitude = record[1], record[2]
        if not _is_degree(latitude, 90.0) or not _is_degree(longitude, 180.0):
            return None
        return cls(timestamp, float(latitude), float(longitude))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an extended ISO-8601 date-time string into an aware datetime.

    Strings without an offset are read as UTC.
    """
    if not isinstance(value, str) or not _ISO_INSTANT.match(value):
        return None
    try:
        ts = datetime.fromisoformat(value)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _is_degree(value: Any, limit: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # int comparison is exact, so huge JSON integers never reach float conversion
    return -limit <= value <= limit and math.isfinite(value)


def elapsed_seconds(prev: Fix, cur: Fix) -> float:
    """Seconds from `prev` to `cur`; zero or negative for out-of-order input."""
    return (cur.timestamp - prev.timestamp).total_seconds()


def distance_meters(prev: Fix, cur: Fix) -> float:
    """Great-circle distance between the two fixes, in metres."""
    return haversine(prev.coordinate, cur.coordinate)
