"""
Cohort classifier.

Separates two groups of users by how they move:
- Cohort selection: label trajectories by screen name (positive = 1.0,
  negative = 0.0, everyone else unlabeled)
- Training: gradient boosting over MetricRecord feature vectors
- Prediction: probability of belonging to the positive cohort, for every user

Workflow:
1. Assemble trajectories
2. Build a CohortPolicy from the training config
3. CohortClassifier(...).fit(trajectories, policy)
4. predict_proba(trajectories) for everyone, labeled or not
"""

import logging
import pickle
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.ensemble import GradientBoostingClassifier

from .config import TrainingConfig
from .errors import EmptyTrainingSetError
from .features import FeatureExtractor
from .models import FEATURE_NAMES, UserTrajectory
from .straightness import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

POSITIVE_LABEL = 1.0
NEGATIVE_LABEL = 0.0


@dataclass(frozen=True)
class CohortPolicy:
    """Two disjoint sets of screen names."""
    positive: FrozenSet[str]
    negative: FrozenSet[str]

    def __post_init__(self):
        overlap = self.positive & self.negative
        if overlap:
            raise ValueError(
                f"Screen names in both cohorts: {', '.join(sorted(overlap))}"
            )

    @classmethod
    def from_names(cls, positive: Iterable[str], negative: Iterable[str]) -> 'CohortPolicy':
        return cls(frozenset(positive), frozenset(negative))

    @classmethod
    def from_config(cls, config: TrainingConfig) -> 'CohortPolicy':
        return cls.from_names(
            config.positive_user_screen_names,
            config.negative_user_screen_names,
        )

    def label_for(self, screen_name: str) -> Optional[float]:
        """1.0 for the positive cohort, 0.0 for the negative one, else None."""
        if screen_name in self.positive:
            return POSITIVE_LABEL
        if screen_name in self.negative:
            return NEGATIVE_LABEL
        return None


def iter_labeled_vectors(
    trajectories: Iterable[UserTrajectory],
    policy: CohortPolicy,
    extractor: Optional[FeatureExtractor] = None,
) -> Iterator[Tuple[np.ndarray, float]]:
    """Yield (feature_vector, label) for every trajectory that belongs to a cohort."""
    extractor = extractor or FeatureExtractor()
    for trajectory in trajectories:
        label = policy.label_for(trajectory.user_screen_name)
        if label is None:
            continue
        yield extractor.extract_vector(trajectory), label


def select_training_data(
    trajectories: Iterable[UserTrajectory],
    policy: CohortPolicy,
    extractor: Optional[FeatureExtractor] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Feature matrix and labels of all cohort members.

    Args:
        trajectories: Assembled trajectories
        policy: Cohort membership by screen name
        extractor: Feature extractor (default chunk size if omitted)

    Returns:
        (X, y) with X of shape (n, len(FEATURE_NAMES)) and y of shape (n,)

    Raises:
        EmptyTrainingSetError: If no trajectory belongs to either cohort
    """
    pairs = list(iter_labeled_vectors(trajectories, policy, extractor))
    n_positive = sum(1 for _, label in pairs if label == POSITIVE_LABEL)
    logger.info(
        "Found %d positive and %d negative labeled user movements",
        n_positive, len(pairs) - n_positive,
    )
    if not pairs:
        raise EmptyTrainingSetError(
            "No user matched the positive or negative screen names"
        )

    X = np.vstack([vector for vector, _ in pairs])
    y = np.array([label for _, label in pairs])
    return X, y


def _with_missing_indicators(X: np.ndarray) -> np.ndarray:
    """
    Model input for a feature matrix.

    GradientBoostingClassifier rejects NaN, so undefined features are filled
    with 0.0 and one indicator column per feature (1.0 where it was NaN) is
    appended. A user without any defined speed thus stays distinct from one
    moving at 0 km/h.

    Returns:
        Array of shape (n, 2 * n_features)
    """
    X = np.asarray(X, dtype=float)
    missing = np.isnan(X)
    return np.hstack([np.where(missing, 0.0, X), missing.astype(float)])


class CohortClassifier:
    """
    Gradient-boosted binary classifier over trajectory metrics.

    A training set with a single class cannot be fit by scikit-learn; in that
    case the classifier degrades to predicting that class with probability 1.
    """

    def __init__(
        self,
        n_estimators: int = 100,
        learning_rate: float = 0.1,
        max_depth: int = 3,
        random_state: int = 42,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize the classifier.

        Args:
            n_estimators: Number of boosting stages
            learning_rate: Shrinkage per stage
            max_depth: Depth of the individual regression trees
            random_state: Seed for reproducible fits
            chunk_size: Straightness chunk size used for the features
        """
        self.n_estimators = n_estimators
        self.learning_rate = learning_rate
        self.max_depth = max_depth
        self.random_state = random_state
        self.extractor = FeatureExtractor(chunk_size)
        self.feature_names = list(FEATURE_NAMES)
        self.model: Optional[GradientBoostingClassifier] = None
        self.constant_label: Optional[float] = None
        self.is_fitted = False

    @classmethod
    def from_config(cls, config: TrainingConfig) -> 'CohortClassifier':
        return cls(
            n_estimators=config.n_estimators,
            learning_rate=config.learning_rate,
            max_depth=config.max_depth,
            random_state=config.random_state,
            chunk_size=config.chunk_size,
        )

    @property
    def is_constant(self) -> bool:
        return self.constant_label is not None

    def _create_model(self) -> GradientBoostingClassifier:
        return GradientBoostingClassifier(
            n_estimators=self.n_estimators,
            learning_rate=self.learning_rate,
            max_depth=self.max_depth,
            random_state=self.random_state,
        )

    def fit_matrix(self, X: np.ndarray, y: np.ndarray) -> 'CohortClassifier':
        """
        Train on a prepared feature matrix.

        Args:
            X: Feature vectors, FEATURE_NAMES column order
            y: Labels, 1.0 or 0.0

        Returns:
            self
        """
        y = np.asarray(y, dtype=float)
        if len(y) == 0:
            raise EmptyTrainingSetError("Cannot train on an empty training set")

        classes = np.unique(y)
        if len(classes) == 1:
            logger.warning(
                "Training set only contains label %.1f; predicting it for everyone",
                classes[0],
            )
            self.model = None
            self.constant_label = float(classes[0])
        else:
            self.model = self._create_model()
            self.model.fit(_with_missing_indicators(X), y)
            self.constant_label = None

        self.is_fitted = True
        return self

    def fit(
        self,
        trajectories: Iterable[UserTrajectory],
        policy: CohortPolicy,
    ) -> 'CohortClassifier':
        """
        Train on the cohort members among ``trajectories``.

        Raises:
            EmptyTrainingSetError: If no trajectory belongs to either cohort
        """
        X, y = select_training_data(trajectories, policy, self.extractor)
        return self.fit_matrix(X, y)

    def predict_proba_matrix(self, X: np.ndarray) -> np.ndarray:
        """Probability of the positive cohort for each row of ``X``."""
        if not self.is_fitted:
            raise ValueError("Model must be fitted before prediction")

        X = np.asarray(X, dtype=float).reshape(-1, len(self.feature_names))
        if self.is_constant:
            return np.full(len(X), self.constant_label)
        if len(X) == 0:
            return np.empty(0)

        proba = self.model.predict_proba(_with_missing_indicators(X))
        positive_column = list(self.model.classes_).index(POSITIVE_LABEL)
        return proba[:, positive_column]

    def predict_proba(
        self,
        trajectories: Iterable[UserTrajectory],
        policy: Optional[CohortPolicy] = None,
    ) -> pd.DataFrame:
        """
        Score every trajectory.

        Args:
            trajectories: Trajectories to score
            policy: If given, the known label of cohort members is included

        Returns:
            DataFrame with columns user_id, user_screen_name, probability, label
            (NaN label for users outside both cohorts), sorted by probability
            descending
        """
        trajectories = list(trajectories)
        X = self.extractor.extract_matrix(trajectories)
        probability = self.predict_proba_matrix(X)

        labels: List[float] = []
        for trajectory in trajectories:
            label = policy.label_for(trajectory.user_screen_name) if policy else None
            labels.append(np.nan if label is None else label)

        result = pd.DataFrame({
            'user_id': [t.user_id for t in trajectories],
            'user_screen_name': [t.user_screen_name for t in trajectories],
            'probability': probability,
            'label': labels,
        })
        return result.sort_values('probability', ascending=False, kind='stable').reset_index(drop=True)

    def feature_importance(self) -> Dict[str, float]:
        """
        Feature importance of the trained model.

        Returns:
            Mapping of feature name to importance, its missing indicator
            included; empty for a constant model
        """
        if not self.is_fitted:
            raise ValueError("Model must be fitted first")
        if self.is_constant:
            return {}
        n = len(self.feature_names)
        importances = self.model.feature_importances_
        combined = importances[:n] + importances[n:]
        return dict(zip(self.feature_names, map(float, combined)))

    def save(self, path: str) -> None:
        """Save model to disk."""
        with open(path, 'wb') as f:
            pickle.dump({
                'model': self.model,
                'constant_label': self.constant_label,
                'chunk_size': self.extractor.chunk_size,
                'feature_names': self.feature_names,
                'is_fitted': self.is_fitted,
            }, f)

    def load(self, path: str) -> 'CohortClassifier':
        """Load model from disk."""
        with open(path, 'rb') as f:
            data = pickle.load(f)

        if list(data['feature_names']) != list(FEATURE_NAMES):
            raise ValueError(
                f"Model was trained on features {data['feature_names']}, "
                f"expected {list(FEATURE_NAMES)}"
            )
        self.model = data['model']
        self.constant_label = data['constant_label']
        self.extractor = FeatureExtractor(data['chunk_size'])
        self.is_fitted = data['is_fitted']

        return self
