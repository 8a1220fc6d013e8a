"""
Straightness of a path, from its convex hull.

straightness = hull perimeter / (2 * path length)

A path that runs along a straight line has a degenerate hull whose closed
ring goes out and back along the path, so the ratio is 1.0. The more a path
doubles back on itself the smaller its hull gets relative to the distance
travelled, and the ratio drops toward 0.
"""

from typing import List

import numpy as np
from shapely.geometry import MultiPoint, Polygon

from .geodesy import distance_covered
from .models import coord_array
from .statistics import median


DEFAULT_CHUNK_SIZE = 10

# Chunks with fewer points than this have no meaningful hull
MIN_CHUNK_POINTS = 3


def convex_hull_ring(coords) -> np.ndarray:
    """
    Convex hull of a point set as a closed ring.

    The hull is computed in planar (lon, lat) space by GEOS' quick-hull.
    Degenerate hulls (all points collinear or identical) are closed as well,
    so the ring of a segment a-b is a, b, a.

    Returns:
        (m, 2) array whose first and last rows are equal; empty for no input
    """
    c = coord_array(coords)
    if len(c) == 0:
        return np.empty((0, 2))

    hull = MultiPoint(c).convex_hull
    if isinstance(hull, Polygon):
        return np.asarray(hull.exterior.coords)

    # LineString or Point
    ring = np.asarray(hull.coords)
    return np.vstack([ring, ring[:1]])


def straightness(coords) -> float:
    """
    Straightness of the path through ``coords``.

    Returns:
        1.0 for a straight path, smaller for curved paths. 1.0 as well when the
        path has no length or the ratio is undefined.
    """
    c = coord_array(coords)
    path_length = distance_covered(c)
    if path_length == 0 or np.isnan(path_length):
        return 1.0

    result = distance_covered(convex_hull_ring(c)) / 2.0 / path_length
    if np.isnan(result):
        return 1.0
    return float(result)


def straightness_chunked(coords, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[float]:
    """
    Straightness of consecutive chunks of ``chunk_size`` points.

    The last chunk may be shorter. Chunks with fewer than three points count
    as straight.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    c = coord_array(coords)
    result = []
    for start in range(0, len(c), chunk_size):
        chunk = c[start:start + chunk_size]
        if len(chunk) < MIN_CHUNK_POINTS:
            result.append(1.0)
        else:
            result.append(straightness(chunk))
    return result


def straightness_chunked_median(coords, chunk_size: int = DEFAULT_CHUNK_SIZE) -> float:
    """Median of :func:`straightness_chunked`."""
    return median(straightness_chunked(coords, chunk_size))
