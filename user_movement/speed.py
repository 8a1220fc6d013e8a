"""
Travel speed between consecutive points of a trajectory.

Speeds are computed in meters per second and converted to km/h only by the
``*_kmh`` helpers. Two points posted within the same second have no defined
speed; those windows come back as NaN.
"""

from typing import List, Optional, Sequence

import numpy as np

from .geodesy import geodesic_distance, pairwise_distances
from .models import PointInTime, coord_array


MPS_TO_KMH = 3.6


def elapsed_seconds(a: PointInTime, b: PointInTime) -> int:
    """Absolute time between two points in whole seconds (truncated)."""
    return abs(int((b.timestamp - a.timestamp).total_seconds()))


def speed(a: PointInTime, b: PointInTime) -> float:
    """
    Speed needed to travel from ``a`` to ``b``.

    Returns:
        Meters per second, NaN if both points fall in the same second
    """
    seconds = elapsed_seconds(a, b)
    if seconds == 0:
        return float('nan')
    return geodesic_distance(a.point, b.point) / seconds


def speeds(points: Sequence[PointInTime]) -> np.ndarray:
    """
    Speed over every pair of consecutive points.

    Args:
        points: Chronologically sorted points, length N

    Returns:
        Array of N-1 speeds in m/s. NaN where the duration is zero.
    """
    if len(points) < 2:
        return np.empty(0)

    distances = pairwise_distances(coord_array([p.point for p in points]))
    durations = np.array(
        [elapsed_seconds(points[i], points[i + 1]) for i in range(len(points) - 1)],
        dtype=float,
    )
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(durations > 0, distances / durations, np.nan)


def speeds_kmh(points: Sequence[PointInTime]) -> np.ndarray:
    """:func:`speeds` in km/h."""
    return speeds(points) * MPS_TO_KMH


def speed_max_kmh(points: Sequence[PointInTime]) -> Optional[float]:
    """Fastest defined speed in km/h, or None if no speed is defined."""
    values = speeds_kmh(points)
    values = values[~np.isnan(values)]
    if len(values) == 0:
        return None
    return float(np.max(values))


def travel_speeds_kmh(points: Sequence[PointInTime]) -> List[Optional[float]]:
    """
    Speed from the previous point, aligned with ``points``.

    The first entry is always None, as is any entry whose speed is undefined.
    """
    result: List[Optional[float]] = [None]
    for value in speeds_kmh(points):
        result.append(None if np.isnan(value) else float(value))
    return result[:len(points)]
