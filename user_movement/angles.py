"""
Turning angles over a three-point sliding window.

Angles are measured in plain (lon, lat) space between the edge vectors
``p0 - p1`` and ``p1 - p2``. They are not corrected for the ellipsoid; the
length-weighted metrics that consume them use geodesic lengths instead.
"""

import numpy as np

from .models import coord_array


def angle_radians(window) -> float:
    """
    Angle at the middle vertex of a three-point window.

    Args:
        window: Three (lon, lat) points

    Returns:
        Angle in radians in [0, pi]; 0 means no change of direction, pi a full
        reversal. NaN if two adjacent points coincide.
    """
    c = coord_array(window)
    if len(c) != 3:
        raise ValueError(f"An angle window needs exactly 3 points, got {len(c)}")
    return float(angles_radians(c)[0])


def angles_radians(coords) -> np.ndarray:
    """
    Turning angle for every three-point window of a sequence.

    Args:
        coords: Sequence of (lon, lat) pairs, length N

    Returns:
        Array of N-2 angles in radians (empty for N < 3). Windows with a
        zero-length edge yield NaN.
    """
    c = coord_array(coords)
    if len(c) < 3:
        return np.empty(0)

    # Edge vectors in 2d (lon, lat) space
    a = c[:-2] - c[1:-1]
    b = c[1:-1] - c[2:]

    dot = np.einsum('ij,ij->i', a, b)
    magnitude = np.linalg.norm(a, axis=1) * np.linalg.norm(b, axis=1)

    with np.errstate(divide='ignore', invalid='ignore'):
        cosine = dot / magnitude
    # Rounding can push the cosine of (anti)parallel edges just past +-1
    return np.arccos(np.clip(cosine, -1.0, 1.0))


def angles_degrees(coords) -> np.ndarray:
    """Same as :func:`angles_radians`, converted to degrees."""
    return np.degrees(angles_radians(coords))
