"""
Curviness: turning angles weighted by the geodesic length around them.

Two definitions are in use and both are kept:

- normalized (``curviness``): angle in radians times the share of the total
  path length covered by the window. The contributions sum to a
  dimensionless total.
- weighted (``curviness_weighted``): angle in degrees times the window length
  in meters, summarised by the mean over all windows.

Windows with a NaN angle (two consecutive identical points) are skipped.
"""

import numpy as np

from .angles import angles_radians
from .geodesy import pairwise_distances
from .models import coord_array
from .statistics import mean


def _angles_and_window_lengths(coords):
    c = coord_array(coords)
    angles = angles_radians(c)
    if len(angles) == 0:
        return angles, np.empty(0), np.empty(0)

    legs = pairwise_distances(c)
    # Each three-point window covers two consecutive legs
    window_lengths = legs[:-1] + legs[1:]
    return angles, window_lengths, legs


def curviness(coords) -> np.ndarray:
    """
    Length-normalized curviness contribution of every defined window.

    Args:
        coords: Chronologically sorted (lon, lat) pairs

    Returns:
        One contribution per window with a defined angle, in input order
    """
    angles, window_lengths, legs = _angles_and_window_lengths(coords)
    defined = ~np.isnan(angles)
    if not np.any(defined):
        return np.empty(0)

    length_total = np.sum(legs)
    return angles[defined] * window_lengths[defined] / length_total


def curviness_total(coords) -> float:
    """Sum of :func:`curviness`; 0.0 when no window contributes."""
    return float(np.sum(curviness(coords)))


def curviness_weighted(coords) -> np.ndarray:
    """
    Degree-weighted curviness of every defined window.

    Returns:
        angle (degrees) * window length (meters) per window with a defined angle
    """
    angles, window_lengths, _ = _angles_and_window_lengths(coords)
    defined = ~np.isnan(angles)
    return np.degrees(angles[defined]) * window_lengths[defined]


def curviness_weighted_mean(coords) -> float:
    """Mean of :func:`curviness_weighted`; NaN when no window contributes."""
    return mean(curviness_weighted(coords))
