"""
Geodesic distance utilities.

Distances are solved on the WGS-84 ellipsoid with Karney's inverse geodesic
algorithm (via pyproj), not with the spherical Haversine approximation.
"""

import numpy as np
from pyproj import Geod

from .models import coord_array


# WGS84 ellipsoid, shared by every distance computation
WGS84_GEOD = Geod(ellps='WGS84')


def _valid_mask(lons: np.ndarray, lats: np.ndarray) -> np.ndarray:
    """Inputs the geodesic solver can handle: finite, |lat| <= 90."""
    return np.isfinite(lons) & np.isfinite(lats) & (np.abs(lats) <= 90.0)


def _inverse_distance(
    lon1: np.ndarray, lat1: np.ndarray, lon2: np.ndarray, lat2: np.ndarray
) -> np.ndarray:
    """
    Vectorised inverse geodesic distance in meters.

    Pairs with an invalid endpoint are not handed to the solver and come back
    as NaN.
    """
    valid = _valid_mask(lon1, lat1) & _valid_mask(lon2, lat2)
    distances = np.full(lon1.shape, np.nan)
    if np.any(valid):
        _, _, dist = WGS84_GEOD.inv(lon1[valid], lat1[valid], lon2[valid], lat2[valid])
        distances[valid] = np.abs(np.asarray(dist, dtype=float))
    return distances


def geodesic_distance(a, b) -> float:
    """
    Shortest distance between two points on the WGS-84 ellipsoid.

    Args:
        a, b: (lon, lat) points in degrees

    Returns:
        Distance in meters; 0.0 for coincident points, NaN when a coordinate
        is out of range or not finite
    """
    result = _inverse_distance(
        np.array([float(a[0])]), np.array([float(a[1])]),
        np.array([float(b[0])]), np.array([float(b[1])]),
    )
    return float(result[0])


def pairwise_distances(coords) -> np.ndarray:
    """
    Geodesic length of every leg of a coordinate sequence.

    Args:
        coords: Sequence of (lon, lat) pairs, length N

    Returns:
        Array of N-1 distances in meters (empty for N < 2)
    """
    c = coord_array(coords)
    if len(c) < 2:
        return np.empty(0)
    return _inverse_distance(c[:-1, 0], c[:-1, 1], c[1:, 0], c[1:, 1])


def distance_covered(coords) -> float:
    """Geodesic length of the polyline through ``coords``, in meters."""
    return float(np.sum(pairwise_distances(coords)))
