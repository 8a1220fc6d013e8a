"""
Command-line interface.

Run:
    python -m user_movement to-geojson tweets-*.jsonl > movements.geojson
    python -m user_movement to-movement-json tweets-*.jsonl > movements.json
    python -m user_movement train training.json tweets-*.jsonl > predictions.json

Results go to stdout, diagnostics to stderr.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .assembly import Trajectories, assemble_trajectories
from .classifier import CohortClassifier, CohortPolicy
from .config import configure_logging, load_training_config
from .errors import UserMovementError
from .export import dumps, to_geojson, to_movement_json
from .tweets import iter_tweet_records

logger = logging.getLogger(__name__)


def _load_trajectories(files: List[str], use_place_centroid: bool) -> Trajectories:
    return assemble_trajectories(iter_tweet_records(files, use_place_centroid=use_place_centroid))


def _cmd_to_geojson(args: argparse.Namespace) -> int:
    trajectories = _load_trajectories(args.jsonl_files, args.place_centroid)
    print(dumps(to_geojson(trajectories.values())))
    return 0


def _cmd_to_movement_json(args: argparse.Namespace) -> int:
    trajectories = _load_trajectories(args.jsonl_files, args.place_centroid)
    print(dumps(to_movement_json(trajectories.values())))
    return 0


def _cmd_train(args: argparse.Namespace) -> int:
    config = load_training_config(args.training_config_file)
    use_place_centroid = args.place_centroid or config.use_place_centroid
    trajectories = _load_trajectories(args.jsonl_files, use_place_centroid)

    policy = CohortPolicy.from_config(config)
    classifier = CohortClassifier.from_config(config).fit(trajectories.values(), policy)

    for name, importance in classifier.feature_importance().items():
        logger.info("feature importance %s: %.4f", name, importance)

    if args.model_out:
        classifier.save(args.model_out)
        logger.info("Saved model to %s", args.model_out)

    predictions = classifier.predict_proba(trajectories.values(), policy)
    print(predictions.to_json(orient='records'))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(
        prog='user_movement',
        description='Reconstruct and analyse user movements from geolocated tweets.',
    )
    p.add_argument('-v', '--verbose', action='count', default=0, help='More log output (-vv for debug)')
    p.add_argument(
        '--place-centroid',
        action='store_true',
        help='Use the centroid of the place bounding box for tweets without coordinates',
    )
    sub = p.add_subparsers(dest='cmd', required=True)

    p_geo = sub.add_parser(
        'to-geojson',
        help='GeoJSON FeatureCollection with a LineString per user, written to stdout',
    )
    p_geo.add_argument('jsonl_files', nargs='+', help='JSONL files containing tweets')
    p_geo.set_defaults(func=_cmd_to_geojson)

    p_mov = sub.add_parser(
        'to-movement-json',
        help='JSON object with the chronologically sorted points of every user, written to stdout',
    )
    p_mov.add_argument('jsonl_files', nargs='+', help='JSONL files containing tweets')
    p_mov.set_defaults(func=_cmd_to_movement_json)

    p_train = sub.add_parser(
        'train',
        help='Train a classifier separating two cohorts of users and score every user',
    )
    p_train.add_argument('training_config_file', help='JSON file with the cohort screen names')
    p_train.add_argument('jsonl_files', nargs='+', help='JSONL files containing tweets')
    p_train.add_argument('--model-out', type=str, default=None, help='Write the trained model (pickle) here')
    p_train.set_defaults(func=_cmd_train)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return int(args.func(args))
    except (OSError, UserMovementError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == '__main__':
    sys.exit(main())
