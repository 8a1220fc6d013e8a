"""
Feature extraction for user trajectories.

Turns a chronologically sorted trajectory into a fixed-shape MetricRecord:
- Point count
- Median straightness over chunks of consecutive points
- Travel speed percentiles (km/h)
"""

from typing import Dict, Iterable

import numpy as np
import pandas as pd

from .angles import angles_degrees
from .models import FEATURE_NAMES, MetricRecord, UserTrajectory
from .speed import speeds_kmh
from .statistics import drop_nan, percentiles
from .straightness import DEFAULT_CHUNK_SIZE, straightness_chunked_median


def build_metrics(
    trajectory: UserTrajectory,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> MetricRecord:
    """
    Compute the metric record of one trajectory.

    Expects the points to be sorted chronologically.

    Args:
        trajectory: Assembled user trajectory
        chunk_size: Number of points per straightness chunk

    Returns:
        MetricRecord; speed fields are NaN when no two points have distinct
        timestamps
    """
    speeds = drop_nan(speeds_kmh(trajectory.points))
    pcs = percentiles(speeds, (10, 50, 80, 100))

    return MetricRecord(
        point_count=len(trajectory.points),
        straightness_median=straightness_chunked_median(trajectory.coords(), chunk_size),
        speed_kmh_p10=pcs[10],
        speed_kmh_p50=pcs[50],
        speed_kmh_p80=pcs[80],
        speed_kmh_p100=pcs[100],
    )


def metrics_frame(
    trajectories: Iterable[UserTrajectory],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> pd.DataFrame:
    """
    Metric records of many trajectories as one table.

    Returns:
        DataFrame indexed by user_id with a user_screen_name column followed by
        the feature columns in FEATURE_NAMES order
    """
    rows = []
    for trajectory in trajectories:
        row = {
            'user_id': trajectory.user_id,
            'user_screen_name': trajectory.user_screen_name,
        }
        row.update(build_metrics(trajectory, chunk_size).to_dict())
        rows.append(row)

    columns = ['user_id', 'user_screen_name', *FEATURE_NAMES]
    return pd.DataFrame(rows, columns=columns).set_index('user_id')


def trajectory_frame(trajectory: UserTrajectory) -> pd.DataFrame:
    """
    Per-point view of a trajectory.

    Columns: timestamp, lon, lat, is_exact_location, speed_kmh (from the
    previous point, NaN for the first point) and angle_deg (turning angle at
    the point, NaN at both ends and at duplicate points).
    """
    coords = trajectory.coords()
    n = len(coords)

    speed = np.full(n, np.nan)
    if n > 1:
        speed[1:] = speeds_kmh(trajectory.points)

    angle = np.full(n, np.nan)
    if n > 2:
        angle[1:-1] = angles_degrees(coords)

    return pd.DataFrame({
        'timestamp': pd.to_datetime(trajectory.timestamps(), utc=True),
        'lon': coords[:, 0],
        'lat': coords[:, 1],
        'is_exact_location': [p.is_exact_location for p in trajectory.points],
        'speed_kmh': speed,
        'angle_deg': angle,
    })


class FeatureExtractor:
    """
    Feature extractor with a fixed straightness chunk size.

    Keeps the configuration in one place for the training and prediction
    paths, which must produce identical vectors.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def extract(self, trajectory: UserTrajectory) -> MetricRecord:
        """Metric record of one trajectory."""
        return build_metrics(trajectory, self.chunk_size)

    def extract_vector(self, trajectory: UserTrajectory) -> np.ndarray:
        """Feature vector of one trajectory, FEATURE_NAMES order."""
        return self.extract(trajectory).to_vector()

    def extract_dict(self, trajectory: UserTrajectory) -> Dict[str, float]:
        """Flat name -> value mapping, e.g. for logging or tables."""
        return self.extract(trajectory).to_dict()

    def extract_matrix(self, trajectories: Iterable[UserTrajectory]) -> np.ndarray:
        """Stack feature vectors into an (n, len(FEATURE_NAMES)) matrix."""
        vectors = [self.extract_vector(t) for t in trajectories]
        if not vectors:
            return np.empty((0, len(FEATURE_NAMES)))
        return np.vstack(vectors)
