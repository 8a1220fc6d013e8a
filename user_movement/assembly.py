"""
Grouping located posts into per-user trajectories.
"""

import dataclasses
import logging
from typing import Dict, Iterable, List, Sequence, TypeVar

from .models import PointInTime, PostRecord, TrajectoryPoint, UserTrajectory
from .speed import travel_speeds_kmh

logger = logging.getLogger(__name__)

MIN_TRAJECTORY_POINTS = 2

PIT = TypeVar('PIT', bound=PointInTime)


def sort_chronologically(points: Sequence[PIT]) -> List[PIT]:
    """
    Points ordered by timestamp, ascending.

    The sort is stable, so points sharing a timestamp keep their input order
    and sorting an already sorted sequence changes nothing.
    """
    return sorted(points, key=lambda p: p.timestamp)


Trajectories = Dict[int, UserTrajectory]


class TrajectoryAssembler:
    """
    Accumulates posts per user and turns them into sorted trajectories.

    Name and screen name are taken from the first post seen for a user;
    later renames are ignored.
    """

    def __init__(self, min_points: int = MIN_TRAJECTORY_POINTS):
        if min_points < MIN_TRAJECTORY_POINTS:
            raise ValueError(
                f"min_points must be at least {MIN_TRAJECTORY_POINTS}, got {min_points}"
            )
        self.min_points = min_points
        self._trajectories: Trajectories = {}
        self.records_seen = 0

    def __len__(self) -> int:
        return len(self._trajectories)

    def add(self, record: PostRecord) -> None:
        """Append one post to its author's trajectory."""
        trajectory = self._trajectories.get(record.user_id)
        if trajectory is None:
            trajectory = UserTrajectory(
                user_id=record.user_id,
                user_name=record.user_name,
                user_screen_name=record.user_screen_name,
            )
            self._trajectories[record.user_id] = trajectory
        trajectory.points.append(TrajectoryPoint.from_record(record))
        self.records_seen += 1

    def add_all(self, records: Iterable[PostRecord]) -> 'TrajectoryAssembler':
        for record in records:
            self.add(record)
        return self

    def finish(self) -> Trajectories:
        """
        Drop short trajectories, sort the rest and hand them over.

        The assembler is empty afterwards and can be reused.

        Returns:
            Mapping of user id to chronologically sorted trajectory
        """
        accumulated, self._trajectories = self._trajectories, {}

        result: Trajectories = {}
        for user_id, trajectory in accumulated.items():
            if len(trajectory.points) < self.min_points:
                logger.debug(
                    "Dropping user %s (@%s): %d point(s)",
                    user_id, trajectory.user_screen_name, len(trajectory.points),
                )
                continue

            points = sort_chronologically(trajectory.points)
            trajectory.points = [
                dataclasses.replace(p, travel_speed_from_last_tweet_kmh=v)
                for p, v in zip(points, travel_speeds_kmh(points))
            ]
            result[user_id] = trajectory

        logger.info(
            "Assembled %d trajectories from %d located posts (%d users below %d points)",
            len(result), self.records_seen, len(accumulated) - len(result), self.min_points,
        )
        self.records_seen = 0
        return result


def assemble_trajectories(
    records: Iterable[PostRecord],
    min_points: int = MIN_TRAJECTORY_POINTS,
) -> Trajectories:
    """Group ``records`` by user into sorted trajectories of at least ``min_points``."""
    return TrajectoryAssembler(min_points=min_points).add_all(records).finish()
