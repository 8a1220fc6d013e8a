"""
Serialization of trajectories to GeoJSON and to the movement JSON format.

NaN never reaches the output: undefined numbers are written as null, and the
JSON encoder refuses non-finite floats.
"""

import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from shapely.geometry import LineString, mapping

from .features import build_metrics
from .models import TrajectoryPoint, UserTrajectory
from .straightness import DEFAULT_CHUNK_SIZE


def _number_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return float(value)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with a trailing Z, e.g. 2020-09-18T18:47:40Z."""
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def trajectory_feature(
    trajectory: UserTrajectory,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Dict[str, Any]:
    """
    GeoJSON Feature for one trajectory.

    The geometry is a LineString through the points in chronological order;
    the properties carry the user and the metric record.
    """
    metrics = build_metrics(trajectory, chunk_size)
    geometry = mapping(LineString(trajectory.coords()))

    properties = {
        'user_id': trajectory.user_id,
        'user_name': trajectory.user_name,
        'user_screen_name': trajectory.user_screen_name,
        'max_speed_kmh': _number_or_none(metrics.speed_kmh_p100),
        'sp_pc_10': _number_or_none(metrics.speed_kmh_p10),
        'sp_pc_50': _number_or_none(metrics.speed_kmh_p50),
        'sp_pc_80': _number_or_none(metrics.speed_kmh_p80),
        'sp_pc_100': _number_or_none(metrics.speed_kmh_p100),
        'straightness_median': _number_or_none(metrics.straightness_median),
    }
    return {
        'type': 'Feature',
        'geometry': {
            'type': geometry['type'],
            'coordinates': [list(c) for c in geometry['coordinates']],
        },
        'properties': properties,
    }


def to_geojson(
    trajectories: Iterable[UserTrajectory],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Dict[str, Any]:
    """FeatureCollection with one LineString feature per trajectory."""
    return {
        'type': 'FeatureCollection',
        'features': [trajectory_feature(t, chunk_size) for t in trajectories],
    }


def point_to_dict(point: TrajectoryPoint) -> Dict[str, Any]:
    lon, lat = point.point
    return {
        'point': {'x': lon, 'y': lat},
        'is_exact_location': point.is_exact_location,
        'timestamp': format_timestamp(point.timestamp),
        'text': point.text,
        'in_reply_to_user_id': point.in_reply_to_user_id,
        'lang': point.lang,
        'travel_speed_from_last_tweet_kmh': _number_or_none(point.travel_speed_from_last_tweet_kmh),
    }


def trajectory_to_dict(trajectory: UserTrajectory) -> Dict[str, Any]:
    return {
        'user_id': trajectory.user_id,
        'user_name': trajectory.user_name,
        'user_screen_name': trajectory.user_screen_name,
        'points': [point_to_dict(p) for p in trajectory.points],
    }


def to_movement_json(trajectories: Iterable[UserTrajectory]) -> Dict[str, Dict[str, Any]]:
    """Mapping of user id (as string, JSON object keys are strings) to trajectory."""
    return {str(t.user_id): trajectory_to_dict(t) for t in trajectories}


def dumps(obj: Any, indent: Optional[int] = None) -> str:
    """JSON text; raises ValueError if a NaN or infinity slipped through."""
    return json.dumps(obj, ensure_ascii=False, allow_nan=False, indent=indent)
