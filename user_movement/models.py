"""
Data models for located posts, trajectories and per-user metrics.

Coordinates are always ``(lon, lat)`` pairs in decimal degrees on WGS-84.
Timestamps are timezone-aware UTC datetimes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np


Coord = Tuple[float, float]  # (lon, lat) in degrees

# Order of MetricRecord.to_vector(); the classifier depends on it.
FEATURE_NAMES = (
    'point_count',
    'straightness_median',
    'speed_kmh_p10',
    'speed_kmh_p50',
    'speed_kmh_p80',
    'speed_kmh_p100',
)


class PointInTime(Protocol):
    """Anything with a location and an instant. Window operators accept these."""

    @property
    def timestamp(self) -> datetime:
        ...

    @property
    def point(self) -> Coord:
        ...


def ensure_utc(dt: datetime) -> datetime:
    """Coerce a datetime to UTC. Naive datetimes are taken to be UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coord_array(coords) -> np.ndarray:
    """
    Convert a sequence of ``(lon, lat)`` pairs into an ``(n, 2)`` float array.

    Args:
        coords: Sequence of pairs, an existing array, or an empty sequence

    Returns:
        Array of shape (n, 2)
    """
    arr = np.asarray(coords, dtype=float)
    if arr.size == 0:
        return np.empty((0, 2))
    return arr.reshape(-1, 2)


@dataclass(frozen=True)
class PostRecord:
    """A parsed, located post as handed to the trajectory assembler."""
    user_id: int
    user_name: str
    user_screen_name: str
    timestamp: datetime  # UTC
    point: Coord
    is_exact_location: bool = True
    text: str = ''
    in_reply_to_user_id: Optional[int] = None
    lang: Optional[str] = None


@dataclass(frozen=True)
class TrajectoryPoint:
    """
    One known location of a user.

    Equality compares every field, ordering only compares timestamps.
    """
    point: Coord
    timestamp: datetime
    is_exact_location: bool = True
    text: str = ''
    in_reply_to_user_id: Optional[int] = None
    lang: Optional[str] = None
    # Filled in once the trajectory is sorted; None for the first point.
    travel_speed_from_last_tweet_kmh: Optional[float] = None

    def __lt__(self, other: 'TrajectoryPoint') -> bool:
        return self.timestamp < other.timestamp

    @classmethod
    def from_record(cls, record: PostRecord) -> 'TrajectoryPoint':
        return cls(
            point=record.point,
            timestamp=record.timestamp,
            is_exact_location=record.is_exact_location,
            text=record.text,
            in_reply_to_user_id=record.in_reply_to_user_id,
            lang=record.lang,
        )


@dataclass
class UserTrajectory:
    """All known locations of one user, sorted chronologically."""
    user_id: int
    user_name: str
    user_screen_name: str
    points: List[TrajectoryPoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def coords(self) -> np.ndarray:
        """(lon, lat) of every point as an (n, 2) array, in point order."""
        return coord_array([p.point for p in self.points])

    def timestamps(self) -> List[datetime]:
        return [p.timestamp for p in self.points]


@dataclass(frozen=True)
class MetricRecord:
    """
    Fixed-shape descriptor of one trajectory.

    NaN marks a statistic that the input left undefined (e.g. no two points
    with distinct timestamps, so no speed at all).
    """
    point_count: int
    straightness_median: float
    speed_kmh_p10: float
    speed_kmh_p50: float
    speed_kmh_p80: float
    speed_kmh_p100: float

    def to_vector(self) -> np.ndarray:
        """Feature vector in ``FEATURE_NAMES`` order."""
        return np.array([float(getattr(self, name)) for name in FEATURE_NAMES])

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in FEATURE_NAMES}


def points_from_sequence(coords: Sequence[Coord], timestamps: Sequence[datetime]) -> List[TrajectoryPoint]:
    """Pair coordinates with timestamps. Handy for building trajectories by hand."""
    if len(coords) != len(timestamps):
        raise ValueError(
            f"Got {len(coords)} coordinates but {len(timestamps)} timestamps"
        )
    return [
        TrajectoryPoint(point=(float(lon), float(lat)), timestamp=ensure_utc(ts))
        for (lon, lat), ts in zip(coords, timestamps)
    ]
