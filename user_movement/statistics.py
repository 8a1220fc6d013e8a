"""
Order statistics over samples that may contain NaN.

NaN is the degeneracy marker used throughout the package, so every summary
drops it first. A summary over an empty sample is NaN.
"""

from typing import Dict, Iterable

import numpy as np


SPEED_PERCENTILES = (10, 50, 80, 100)


def drop_nan(values) -> np.ndarray:
    """Flatten ``values`` into a float array without NaN entries."""
    arr = np.asarray(values, dtype=float).ravel()
    return arr[~np.isnan(arr)]


def percentile(values, p: float) -> float:
    """
    p-th percentile, approximately median-unbiased (Hyndman & Fan type 8).

    Args:
        values: Sample, NaN entries are ignored
        p: Percentile in [0, 100]

    Returns:
        The percentile, or NaN if the sample is empty after filtering
    """
    if not 0 <= p <= 100:
        raise ValueError(f"Percentile must be within [0, 100], got {p}")
    sample = drop_nan(values)
    if len(sample) == 0:
        return float('nan')
    return float(np.percentile(sample, p, method='median_unbiased'))


def percentiles(values, ps: Iterable[float] = SPEED_PERCENTILES) -> Dict[float, float]:
    """Several percentiles of the same sample, keyed by p."""
    sample = drop_nan(values)
    return {p: percentile(sample, p) for p in ps}


def median(values) -> float:
    """Median (the 50th percentile) of the NaN-free sample."""
    return percentile(values, 50)


def mean(values) -> float:
    """Arithmetic mean of the NaN-free sample, NaN if it is empty."""
    sample = drop_nan(values)
    if len(sample) == 0:
        return float('nan')
    return float(np.mean(sample))
