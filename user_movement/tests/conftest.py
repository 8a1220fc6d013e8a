"""
Shared fixtures for the user movement tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from user_movement.models import UserTrajectory, points_from_sequence


T0 = datetime(2020, 9, 18, 12, 0, 0, tzinfo=timezone.utc)


def build_trajectory(coords, seconds=None, user_id=1, screen_name='alice'):
    """Trajectory through ``coords`` with points ``seconds`` after T0 (default: one per minute)."""
    if seconds is None:
        seconds = [60 * i for i in range(len(coords))]
    timestamps = [T0 + timedelta(seconds=s) for s in seconds]
    return UserTrajectory(
        user_id=user_id,
        user_name=screen_name.title(),
        user_screen_name=screen_name,
        points=points_from_sequence(coords, timestamps),
    )


@pytest.fixture
def make_trajectory():
    return build_trajectory


@pytest.fixture
def equator_coords():
    """11 equally spaced points along the equator, lon 0 to 10."""
    return [(float(lon), 0.0) for lon in range(11)]
