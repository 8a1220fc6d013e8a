"""
Synthetic tweet data for testing and development.

Generates located tweets for users with different movement patterns:
- Traveller: long straight legs at train/plane speeds
- Wanderer: slow random walk around a home location
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .tweets import TWITTER_DATE_FORMAT


# Reference location: Berlin
DEFAULT_START_LAT = 52.52
DEFAULT_START_LON = 13.405
DEFAULT_START_TIME = datetime(2020, 9, 18, 12, 0, 0, tzinfo=timezone.utc)


def _meters_to_degrees_lat(meters: float) -> float:
    """Convert meters to degrees latitude (approximate)."""
    return meters / 111320.0


def _meters_to_degrees_lon(meters: float, lat: float) -> float:
    """Convert meters to degrees longitude at given latitude."""
    return meters / (111320.0 * np.cos(np.radians(lat)))


def make_tweet(
    user_id: int,
    screen_name: str,
    lon: float,
    lat: float,
    created_at: datetime,
    tweet_id: int = 0,
    text: str = '',
    name: Optional[str] = None,
    lang: Optional[str] = 'en',
) -> Dict[str, Any]:
    """A minimal tweet object with an exact GeoJSON Point location."""
    return {
        'id': tweet_id,
        'created_at': created_at.astimezone(timezone.utc).strftime(TWITTER_DATE_FORMAT),
        'text': text,
        'lang': lang,
        'in_reply_to_user_id': None,
        'user': {
            'id': user_id,
            'name': name if name is not None else screen_name.title(),
            'screen_name': screen_name,
        },
        'coordinates': {'type': 'Point', 'coordinates': [lon, lat]},
        'place': None,
    }


def generate_traveller_track(
    num_points: int,
    start_lat: float = DEFAULT_START_LAT,
    start_lon: float = DEFAULT_START_LON,
    heading: float = 90.0,  # degrees, 0 = North
    speed: float = 60.0,  # m/s
    interval: float = 1800.0,  # seconds between tweets
    heading_noise: float = 5.0,  # degrees
):
    """
    Straight-ish fast movement.

    Returns:
        Tuple of (longitudes, latitudes, seconds since start)
    """
    times = np.arange(num_points) * interval
    headings = np.radians(heading + np.random.normal(0, heading_noise, num_points))
    step = speed * interval

    x = np.concatenate([[0.0], np.cumsum(step * np.sin(headings[1:]))])  # East
    y = np.concatenate([[0.0], np.cumsum(step * np.cos(headings[1:]))])  # North

    lats = start_lat + _meters_to_degrees_lat(y)
    lons = start_lon + _meters_to_degrees_lon(x, start_lat)
    return lons, lats, times


def generate_wanderer_track(
    num_points: int,
    start_lat: float = DEFAULT_START_LAT,
    start_lon: float = DEFAULT_START_LON,
    step_std: float = 400.0,  # meters
    interval: float = 3600.0,  # seconds between tweets
):
    """
    Slow random walk that keeps crossing its own path.

    Returns:
        Tuple of (longitudes, latitudes, seconds since start)
    """
    times = np.arange(num_points) * interval
    x = np.concatenate([[0.0], np.cumsum(np.random.normal(0, step_std, num_points - 1))])
    y = np.concatenate([[0.0], np.cumsum(np.random.normal(0, step_std, num_points - 1))])

    lats = start_lat + _meters_to_degrees_lat(y)
    lons = start_lon + _meters_to_degrees_lon(x, start_lat)
    return lons, lats, times


def generate_user_tweets(
    user_id: int,
    screen_name: str,
    pattern: str = 'wanderer',
    num_points: int = 20,
    start_time: datetime = DEFAULT_START_TIME,
    seed: Optional[int] = None,
    shuffle: bool = True,
) -> List[Dict[str, Any]]:
    """
    Generate the located tweets of one user.

    Args:
        user_id: Numeric user id
        screen_name: Handle of the user
        pattern: 'traveller' or 'wanderer'
        num_points: Number of tweets
        start_time: Time of the first tweet
        seed: Random seed for reproducibility
        shuffle: Emit tweets out of chronological order, like merged dumps do

    Returns:
        List of tweet objects
    """
    if num_points < 1:
        raise ValueError("num_points must be positive")
    if seed is not None:
        np.random.seed(seed)

    if pattern == 'traveller':
        lons, lats, times = generate_traveller_track(num_points)
    elif pattern == 'wanderer':
        lons, lats, times = generate_wanderer_track(num_points)
    else:
        raise ValueError(f"Unknown movement pattern: {pattern}")

    tweets = [
        make_tweet(
            user_id,
            screen_name,
            float(lon),
            float(lat),
            start_time + timedelta(seconds=float(t)),
            tweet_id=user_id * 1_000_000 + i,
            text=f"{pattern} update {i}",
        )
        for i, (lon, lat, t) in enumerate(zip(lons, lats, times))
    ]

    if shuffle:
        order = np.random.permutation(len(tweets))
        tweets = [tweets[i] for i in order]
    return tweets


def generate_tweet_dataset(
    travellers: List[str],
    wanderers: List[str],
    num_points: int = 20,
    seed: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Tweets of several users, interleaved.

    User ids are assigned in order, travellers first, starting at 1.
    """
    if seed is not None:
        np.random.seed(seed)

    tweets: List[Dict[str, Any]] = []
    users = [(name, 'traveller') for name in travellers] + [(name, 'wanderer') for name in wanderers]
    for user_id, (screen_name, pattern) in enumerate(users, start=1):
        tweets.extend(generate_user_tweets(user_id, screen_name, pattern, num_points))

    order = np.random.permutation(len(tweets))
    return [tweets[i] for i in order]


def write_jsonl(tweets: List[Dict[str, Any]], path: Union[str, Path]) -> Path:
    """Write tweet objects one per line."""
    p = Path(path)
    with p.open('w', encoding='utf-8') as f:
        for tweet in tweets:
            f.write(json.dumps(tweet))
            f.write('\n')
    return p
