"""
Reading located posts from tweet JSONL files.

Each line holds one tweet object as delivered by the Twitter API. Only a few
fields are used:

- user.id / user.name / user.screen_name
- created_at, e.g. "Wed Oct 10 20:19:24 +0000 2018" (ISO-8601 accepted too)
- coordinates: GeoJSON Point, the exact posting location
- place.bounding_box: GeoJSON Polygon, used (as centroid) only when enabled
- text / full_text, in_reply_to_user_id, lang
"""

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

from shapely.geometry import Point, shape

from .errors import TweetParseError
from .models import Coord, PostRecord, ensure_utc

logger = logging.getLogger(__name__)

TWITTER_DATE_FORMAT = '%a %b %d %H:%M:%S %z %Y'


def parse_created_at(text: str) -> datetime:
    """
    Parse a tweet timestamp into a UTC datetime.

    Raises:
        TweetParseError: If the text matches neither the Twitter nor the ISO format
    """
    try:
        return ensure_utc(datetime.strptime(text, TWITTER_DATE_FORMAT))
    except (TypeError, ValueError):
        pass
    try:
        return ensure_utc(datetime.fromisoformat(str(text).replace('Z', '+00:00')))
    except ValueError as exc:
        raise TweetParseError(f"Unparseable created_at {text!r}") from exc


def _geometry(value: Any, what: str):
    try:
        return shape(value)
    except Exception as exc:  # shapely raises a mix of GEOS/Type/Value/Key errors
        raise TweetParseError(f"Invalid {what} geometry: {exc}") from exc


def _check_finite(point: Point, what: str) -> None:
    if not (math.isfinite(point.x) and math.isfinite(point.y)):
        raise TweetParseError(f"Non-finite {what} location ({point.x}, {point.y})")


def geo_point(tweet: Dict[str, Any], use_place_centroid: bool = False) -> Optional[Tuple[Coord, bool]]:
    """
    Location of a tweet.

    Args:
        tweet: Decoded tweet object
        use_place_centroid: Fall back to the centroid of the place bounding box

    Returns:
        ((lon, lat), is_exact_location) or None when the tweet has no usable
        location

    Raises:
        TweetParseError: If a present geometry cannot be decoded
    """
    coordinates = tweet.get('coordinates')
    if coordinates:
        geom = _geometry(coordinates, 'coordinates')
        if not isinstance(geom, Point) or geom.is_empty:
            raise TweetParseError(f"Expected a Point in coordinates, got {geom.geom_type}")
        _check_finite(geom, 'coordinates')
        return (geom.x, geom.y), True

    if use_place_centroid:
        place = tweet.get('place') or {}
        bounding_box = place.get('bounding_box')
        if bounding_box:
            centroid = _geometry(bounding_box, 'place bounding_box').centroid
            if not centroid.is_empty:
                _check_finite(centroid, 'place bounding_box')
                return (centroid.x, centroid.y), False

    return None


def parse_tweet(tweet: Dict[str, Any], use_place_centroid: bool = False) -> Optional[PostRecord]:
    """
    Turn a decoded tweet into a PostRecord.

    Returns:
        The record, or None if the tweet carries no location

    Raises:
        TweetParseError: If required fields are missing or malformed
    """
    if not isinstance(tweet, dict):
        raise TweetParseError(f"Expected a JSON object, got {type(tweet).__name__}")
    try:
        user = tweet['user']
        user_id = int(user['id'])
        user_name = str(user['name'])
        user_screen_name = str(user['screen_name'])
        created_at = tweet['created_at']
        reply_to = tweet.get('in_reply_to_user_id')
        if reply_to is not None:
            reply_to = int(reply_to)
    except (KeyError, TypeError, ValueError) as exc:
        raise TweetParseError(f"Missing or malformed user/created_at field: {exc!r}") from exc

    location = geo_point(tweet, use_place_centroid)
    if location is None:
        return None
    point, is_exact = location

    return PostRecord(
        user_id=user_id,
        user_name=user_name,
        user_screen_name=user_screen_name,
        timestamp=parse_created_at(created_at),
        point=point,
        is_exact_location=is_exact,
        text=tweet.get('full_text') or tweet.get('text') or '',
        in_reply_to_user_id=reply_to,
        lang=tweet.get('lang'),
    )


def parse_tweet_line(line: Union[str, bytes], use_place_centroid: bool = False) -> Optional[PostRecord]:
    """Decode one JSONL line (text or UTF-8 bytes); see :func:`parse_tweet`."""
    try:
        if isinstance(line, bytes):
            line = line.decode('utf-8')
        tweet = json.loads(line)
    except UnicodeDecodeError as exc:
        raise TweetParseError(f"Invalid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise TweetParseError(f"Invalid JSON: {exc}") from exc
    return parse_tweet(tweet, use_place_centroid)


def iter_tweet_records(
    paths: Iterable[Union[str, Path]],
    use_place_centroid: bool = False,
) -> Iterator[PostRecord]:
    """
    Yield located posts from tweet JSONL files.

    Blank lines and tweets without a location are skipped silently; lines that
    fail to parse are logged and skipped.

    Raises:
        OSError: If a file cannot be opened or read
    """
    for path in paths:
        parsed = skipped = 0
        # Binary mode so one undecodable line is skipped like any other bad line
        with open(path, 'rb') as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    record = parse_tweet_line(line, use_place_centroid)
                except TweetParseError as exc:
                    skipped += 1
                    logger.warning("%s:%d: failed to parse tweet - %s", path, line_no, exc)
                    continue
                if record is not None:
                    parsed += 1
                    yield record
        logger.info("%s: %d located posts, %d lines skipped", path, parsed, skipped)
