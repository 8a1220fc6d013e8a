"""
Tests for cohort selection and the cohort classifier.
"""

import numpy as np
import pytest

from user_movement import (
    CohortClassifier,
    CohortPolicy,
    EmptyTrainingSetError,
    assemble_trajectories,
    build_metrics,
    select_training_data,
)
from user_movement.classifier import iter_labeled_vectors
from user_movement.config import TrainingConfig
from user_movement.sample_data import generate_tweet_dataset
from user_movement.tweets import parse_tweet


TRAVELLERS = ['train_fan', 'pilot', 'courier', 'nomad']
WANDERERS = ['homebody', 'gardener', 'barista', 'librarian']


@pytest.fixture
def cohort_trajectories(make_trajectory):
    return [
        make_trajectory([(0.0, 0.0), (0.0, 0.1), (0.1, 0.1)], user_id=1, screen_name='alice'),
        make_trajectory([(1.0, 0.0), (1.0, 0.1)], user_id=2, screen_name='bob'),
        make_trajectory([(2.0, 0.0), (2.0, 0.5)], user_id=3, screen_name='carol'),
    ]


@pytest.fixture(scope='module')
def dataset_trajectories():
    tweets = generate_tweet_dataset(TRAVELLERS, WANDERERS, num_points=25, seed=42)
    return assemble_trajectories(parse_tweet(t) for t in tweets)


class TestCohortPolicy:
    """Tests for cohort labels."""

    def test_labels(self):
        policy = CohortPolicy.from_names(['alice'], ['bob'])
        assert policy.label_for('alice') == 1.0
        assert policy.label_for('bob') == 0.0
        assert policy.label_for('carol') is None

    def test_overlap_is_rejected(self):
        with pytest.raises(ValueError):
            CohortPolicy.from_names(['alice'], ['alice', 'bob'])

    def test_from_config(self):
        config = TrainingConfig(['alice'], ['bob'])
        assert CohortPolicy.from_config(config) == CohortPolicy(frozenset({'alice'}), frozenset({'bob'}))


class TestSelection:
    """Tests for training data selection."""

    def test_cohort_selection(self, cohort_trajectories):
        policy = CohortPolicy.from_names(['alice'], ['bob'])
        X, y = select_training_data(cohort_trajectories, policy)

        assert X.shape == (2, 6)
        assert list(y) == [1.0, 0.0]
        np.testing.assert_array_equal(X[0], build_metrics(cohort_trajectories[0]).to_vector())
        np.testing.assert_array_equal(X[1], build_metrics(cohort_trajectories[1]).to_vector())

    def test_unlabeled_users_are_skipped(self, cohort_trajectories):
        policy = CohortPolicy.from_names(['alice'], ['bob'])
        pairs = list(iter_labeled_vectors(cohort_trajectories, policy))
        assert len(pairs) == 2
        assert [label for _, label in pairs] == [1.0, 0.0]

    def test_empty_cohorts(self, cohort_trajectories):
        policy = CohortPolicy.from_names(['dave'], ['erin'])
        with pytest.raises(EmptyTrainingSetError):
            select_training_data(cohort_trajectories, policy)


class TestCohortClassifier:
    """Tests for training and prediction."""

    def test_separates_travellers_from_wanderers(self, dataset_trajectories):
        policy = CohortPolicy.from_names(TRAVELLERS, WANDERERS)
        classifier = CohortClassifier(n_estimators=50).fit(dataset_trajectories.values(), policy)

        predictions = classifier.predict_proba(dataset_trajectories.values(), policy)
        assert list(predictions.columns) == ['user_id', 'user_screen_name', 'probability', 'label']
        assert len(predictions) == len(TRAVELLERS) + len(WANDERERS)

        by_name = predictions.set_index('user_screen_name')['probability']
        assert by_name[TRAVELLERS].min() > by_name[WANDERERS].max()
        assert predictions['probability'].is_monotonic_decreasing

    def test_unlabeled_users_are_scored(self, dataset_trajectories):
        policy = CohortPolicy.from_names(TRAVELLERS[:2], WANDERERS[:2])
        classifier = CohortClassifier(n_estimators=20).fit(dataset_trajectories.values(), policy)

        predictions = classifier.predict_proba(dataset_trajectories.values(), policy)
        unlabeled = predictions[predictions['label'].isna()]
        assert set(unlabeled['user_screen_name']) == set(TRAVELLERS[2:] + WANDERERS[2:])
        assert predictions['probability'].between(0, 1).all()

    def test_feature_importance(self, dataset_trajectories):
        policy = CohortPolicy.from_names(TRAVELLERS, WANDERERS)
        classifier = CohortClassifier(n_estimators=20).fit(dataset_trajectories.values(), policy)

        importance = classifier.feature_importance()
        assert list(importance) == list(classifier.feature_names)
        assert sum(importance.values()) == pytest.approx(1.0)

    def test_single_class_is_constant(self, cohort_trajectories):
        policy = CohortPolicy.from_names(['alice', 'carol'], [])
        classifier = CohortClassifier().fit(cohort_trajectories, policy)

        assert classifier.is_constant
        assert classifier.feature_importance() == {}
        np.testing.assert_array_equal(
            classifier.predict_proba(cohort_trajectories)['probability'].values, [1.0, 1.0, 1.0]
        )

    def test_nan_features_are_accepted(self, make_trajectory):
        # simultaneous points leave every speed percentile undefined
        trajectories = [
            make_trajectory([(0.0, 0.0), (0.0, 0.1)], seconds=[0, 0], user_id=1, screen_name='a'),
            make_trajectory([(0.0, 0.0), (0.0, 0.1)], seconds=[0, 60], user_id=2, screen_name='b'),
        ]
        classifier = CohortClassifier(n_estimators=5).fit(trajectories, CohortPolicy.from_names(['a'], ['b']))
        assert len(classifier.predict_proba(trajectories)) == 2

    def test_undefined_speed_differs_from_standing_still(self, make_trajectory):
        standing = make_trajectory([(13.4, 52.5), (13.4, 52.5)], seconds=[0, 60], user_id=1, screen_name='a')
        simultaneous = make_trajectory([(13.4, 52.5), (13.4, 52.5)], seconds=[0, 0], user_id=2, screen_name='b')
        trajectories = [standing, simultaneous]

        X, _ = select_training_data(trajectories, CohortPolicy.from_names(['a'], ['b']))
        assert X[0, 2:].tolist() == [0.0, 0.0, 0.0, 0.0]
        assert np.isnan(X[1, 2:]).all()

        classifier = CohortClassifier(n_estimators=10).fit(trajectories, CohortPolicy.from_names(['a'], ['b']))
        by_name = classifier.predict_proba(trajectories).set_index('user_screen_name')['probability']
        assert by_name['a'] > 0.5 > by_name['b']

    def test_predict_before_fit(self, cohort_trajectories):
        with pytest.raises(ValueError):
            CohortClassifier().predict_proba(cohort_trajectories)

    def test_fit_empty_cohorts(self, cohort_trajectories):
        with pytest.raises(EmptyTrainingSetError):
            CohortClassifier().fit(cohort_trajectories, CohortPolicy.from_names(['x'], ['y']))

    def test_save_and_load(self, dataset_trajectories, tmp_path):
        policy = CohortPolicy.from_names(TRAVELLERS, WANDERERS)
        classifier = CohortClassifier(n_estimators=20, chunk_size=5).fit(dataset_trajectories.values(), policy)
        path = tmp_path / 'model.pkl'
        classifier.save(str(path))

        loaded = CohortClassifier().load(str(path))
        assert loaded.extractor.chunk_size == 5
        np.testing.assert_allclose(
            loaded.predict_proba(dataset_trajectories.values())['probability'].values,
            classifier.predict_proba(dataset_trajectories.values())['probability'].values,
        )

    def test_from_config(self):
        config = TrainingConfig(['a'], ['b'], n_estimators=7, max_depth=2, chunk_size=4)
        classifier = CohortClassifier.from_config(config)
        assert classifier.n_estimators == 7
        assert classifier.max_depth == 2
        assert classifier.extractor.chunk_size == 4
