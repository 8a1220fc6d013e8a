"""
User Movement - Reconstruct and describe how users move from geolocated tweets.

This package provides tools for:
- Grouping located posts into chronologically sorted per-user trajectories
- Geodesic distances, turning angles, speeds, curviness and straightness
- Per-user metric records (speed percentiles, median straightness)
- Training a gradient-boosted classifier that separates two user cohorts
- Exporting trajectories as GeoJSON or movement JSON

Example usage:
    from user_movement import assemble_trajectories, iter_tweet_records, build_metrics

    trajectories = assemble_trajectories(iter_tweet_records(['tweets.jsonl']))
    for trajectory in trajectories.values():
        print(trajectory.user_screen_name, build_metrics(trajectory))
"""

from .angles import angle_radians, angles_degrees, angles_radians
from .assembly import TrajectoryAssembler, assemble_trajectories, sort_chronologically
from .classifier import CohortClassifier, CohortPolicy, select_training_data
from .curviness import curviness, curviness_total, curviness_weighted, curviness_weighted_mean
from .errors import ConfigError, EmptyTrainingSetError, TweetParseError, UserMovementError
from .features import FeatureExtractor, build_metrics, metrics_frame, trajectory_frame
from .geodesy import distance_covered, geodesic_distance, pairwise_distances
from .models import FEATURE_NAMES, MetricRecord, PointInTime, PostRecord, TrajectoryPoint, UserTrajectory
from .sample_data import generate_tweet_dataset, generate_user_tweets, write_jsonl
from .speed import speed, speed_max_kmh, speeds, speeds_kmh
from .statistics import median, percentile, percentiles
from .straightness import straightness, straightness_chunked, straightness_chunked_median
from .tweets import iter_tweet_records, parse_tweet

__version__ = "0.1.0"
__all__ = [
    "angle_radians",
    "angles_degrees",
    "angles_radians",
    "TrajectoryAssembler",
    "assemble_trajectories",
    "sort_chronologically",
    "CohortClassifier",
    "CohortPolicy",
    "select_training_data",
    "curviness",
    "curviness_total",
    "curviness_weighted",
    "curviness_weighted_mean",
    "ConfigError",
    "EmptyTrainingSetError",
    "TweetParseError",
    "UserMovementError",
    "FeatureExtractor",
    "build_metrics",
    "metrics_frame",
    "trajectory_frame",
    "distance_covered",
    "geodesic_distance",
    "pairwise_distances",
    "FEATURE_NAMES",
    "MetricRecord",
    "PointInTime",
    "PostRecord",
    "TrajectoryPoint",
    "UserTrajectory",
    "speed",
    "speed_max_kmh",
    "speeds",
    "speeds_kmh",
    "generate_tweet_dataset",
    "generate_user_tweets",
    "write_jsonl",
    "median",
    "percentile",
    "percentiles",
    "straightness",
    "straightness_chunked",
    "straightness_chunked_median",
    "iter_tweet_records",
    "parse_tweet",
]
