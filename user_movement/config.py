"""
Training configuration and logging setup.

A training configuration is a JSON object:

    {
        "positive_user_screen_names": ["alice"],
        "negative_user_screen_names": ["bob"],
        "n_estimators": 100,          # optional
        "learning_rate": 0.1,         # optional
        "max_depth": 3,               # optional
        "random_state": 42,           # optional
        "chunk_size": 10,             # optional
        "use_place_centroid": false   # optional
    }
"""

import json
import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Union

from .errors import ConfigError


LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


@dataclass
class TrainingConfig:
    """Cohorts and gradient boosting parameters for the train command."""
    positive_user_screen_names: List[str]
    negative_user_screen_names: List[str]
    n_estimators: int = 100
    learning_rate: float = 0.1
    max_depth: int = 3
    random_state: int = 42
    chunk_size: int = 10
    use_place_centroid: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrainingConfig':
        """
        Build a config from a decoded JSON object.

        Raises:
            ConfigError: If a required key is missing or a value has the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Training config must be a JSON object, got {type(data).__name__}")

        for key in ('positive_user_screen_names', 'negative_user_screen_names'):
            if key not in data:
                raise ConfigError(f"Training config is missing {key!r}")
            value = data[key]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{key!r} must be a list of screen names")

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown training config keys: {', '.join(unknown)}")

        kwargs = {}
        for key, value in data.items():
            expected = known[key].type
            if expected is bool and not isinstance(value, bool):
                raise ConfigError(f"{key!r} must be true or false")
            if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
                raise ConfigError(f"{key!r} must be an integer")
            if expected is float and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ConfigError(f"{key!r} must be a number")
            kwargs[key] = float(value) if expected is float else value

        config = cls(**kwargs)
        config.validate()
        return config

    def validate(self) -> None:
        overlap = set(self.positive_user_screen_names) & set(self.negative_user_screen_names)
        if overlap:
            raise ConfigError(
                f"Screen names listed in both cohorts: {', '.join(sorted(overlap))}"
            )
        if self.n_estimators < 1:
            raise ConfigError("n_estimators must be positive")
        if self.learning_rate <= 0:
            raise ConfigError("learning_rate must be positive")
        if self.max_depth < 1:
            raise ConfigError("max_depth must be positive")
        if self.chunk_size < 1:
            raise ConfigError("chunk_size must be positive")


def load_training_config(path: Union[str, Path]) -> TrainingConfig:
    """
    Read a training configuration file.

    Raises:
        OSError: If the file cannot be read
        ConfigError: If it is not valid JSON or fails validation
    """
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Training config {path} is not valid JSON: {exc}") from exc
    return TrainingConfig.from_dict(data)


def configure_logging(verbosity: int = 0) -> None:
    """
    Send log records to stderr; stdout is reserved for command output.

    Args:
        verbosity: 0 = warnings, 1 = info, 2+ = debug
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
