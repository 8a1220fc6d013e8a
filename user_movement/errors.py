"""
Exceptions raised by the user movement toolkit.

Geometric degeneracies (duplicate points, zero durations, empty samples) are
never raised: the operators return NaN and aggregations drop it. Only
conditions the caller has to act on get an exception type.
"""


class UserMovementError(Exception):
    """Base class for all errors raised by this package."""


class EmptyTrainingSetError(UserMovementError):
    """No trajectory matched either cohort of a training policy."""


class ConfigError(UserMovementError):
    """A training configuration is missing keys or has values of the wrong type."""


class TweetParseError(UserMovementError):
    """A tweet line could not be decoded into a located post."""
