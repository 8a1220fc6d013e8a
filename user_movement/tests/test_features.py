"""
Tests for the metric record builder.
"""

import math

import numpy as np
import pandas as pd
import pytest

from user_movement import FEATURE_NAMES, FeatureExtractor, build_metrics, geodesic_distance, metrics_frame, trajectory_frame


class TestBuildMetrics:
    """Tests for build_metrics."""

    def test_two_point_trajectory(self, make_trajectory):
        """All speed percentiles equal the single leg's speed."""
        trajectory = make_trajectory([(13.4, 52.5), (13.41, 52.5)], seconds=[0, 10])
        expected_kmh = geodesic_distance((13.4, 52.5), (13.41, 52.5)) / 10 * 3.6

        metrics = build_metrics(trajectory)
        assert metrics.point_count == 2
        assert metrics.speed_kmh_p10 == pytest.approx(expected_kmh)
        assert metrics.speed_kmh_p50 == pytest.approx(expected_kmh)
        assert metrics.speed_kmh_p80 == pytest.approx(expected_kmh)
        assert metrics.speed_kmh_p100 == pytest.approx(expected_kmh)
        assert metrics.straightness_median == 1.0

    def test_straight_equatorial_segment(self, make_trajectory, equator_coords):
        metrics = build_metrics(make_trajectory(equator_coords))
        assert metrics.point_count == 11
        assert metrics.straightness_median == pytest.approx(1.0, abs=1e-3)

    def test_undefined_speeds_are_nan(self, make_trajectory):
        trajectory = make_trajectory([(0.0, 0.0), (0.1, 0.1), (0.2, 0.2)], seconds=[0, 0, 0])
        metrics = build_metrics(trajectory)
        assert math.isnan(metrics.speed_kmh_p10)
        assert math.isnan(metrics.speed_kmh_p100)
        assert math.isfinite(metrics.straightness_median)

    def test_simultaneous_leg_is_excluded(self, make_trajectory):
        trajectory = make_trajectory([(0.0, 0.0), (0.0, 0.01), (0.0, 0.02)], seconds=[0, 0, 60])
        metrics = build_metrics(trajectory)
        expected_kmh = geodesic_distance((0.0, 0.01), (0.0, 0.02)) / 60 * 3.6
        assert metrics.speed_kmh_p10 == pytest.approx(expected_kmh)
        assert metrics.speed_kmh_p100 == pytest.approx(expected_kmh)

    def test_percentiles_are_ordered(self, make_trajectory):
        rng = np.random.default_rng(11)
        coords = [tuple(c) for c in rng.uniform(0, 1, size=(25, 2))]
        metrics = build_metrics(make_trajectory(coords))
        assert metrics.speed_kmh_p10 <= metrics.speed_kmh_p50 <= metrics.speed_kmh_p80 <= metrics.speed_kmh_p100

    def test_idempotent(self, make_trajectory):
        trajectory = make_trajectory([(0.0, 0.0), (0.3, 0.1), (0.1, 0.4), (0.5, 0.5)])
        assert build_metrics(trajectory) == build_metrics(trajectory)

    def test_vector_order(self, make_trajectory):
        metrics = build_metrics(make_trajectory([(0.0, 0.0), (0.3, 0.1), (0.1, 0.4)]))
        vector = metrics.to_vector()
        assert len(vector) == len(FEATURE_NAMES) == 6
        assert list(vector) == [
            3.0,
            metrics.straightness_median,
            metrics.speed_kmh_p10,
            metrics.speed_kmh_p50,
            metrics.speed_kmh_p80,
            metrics.speed_kmh_p100,
        ]


class TestFrames:
    """Tests for the pandas views."""

    def test_metrics_frame(self, make_trajectory):
        trajectories = [
            make_trajectory([(0.0, 0.0), (0.0, 0.1)], user_id=1, screen_name='alice'),
            make_trajectory([(1.0, 0.0), (1.0, 0.1), (1.1, 0.1)], user_id=2, screen_name='bob'),
        ]
        df = metrics_frame(trajectories)

        assert list(df.index) == [1, 2]
        assert list(df.columns) == ['user_screen_name', *FEATURE_NAMES]
        assert df.loc[2, 'point_count'] == 3
        assert df.loc[1, 'user_screen_name'] == 'alice'

    def test_metrics_frame_empty(self):
        df = metrics_frame([])
        assert len(df) == 0
        assert 'straightness_median' in df.columns

    def test_trajectory_frame(self, make_trajectory):
        trajectory = make_trajectory([(10, 10), (10, 20), (18, 20)], seconds=[0, 60, 120])
        df = trajectory_frame(trajectory)

        assert list(df.columns) == ['timestamp', 'lon', 'lat', 'is_exact_location', 'speed_kmh', 'angle_deg']
        assert len(df) == 3
        assert np.isnan(df['speed_kmh'].iloc[0])
        assert df['speed_kmh'].iloc[1] > 0
        assert df['angle_deg'].iloc[1] == pytest.approx(90.0)
        assert np.isnan(df['angle_deg'].iloc[0]) and np.isnan(df['angle_deg'].iloc[2])
        assert pd.api.types.is_datetime64_any_dtype(df['timestamp'])


class TestFeatureExtractor:
    """Tests for FeatureExtractor."""

    def test_chunk_size_is_used(self, make_trajectory):
        # out and back twice: chunk size 3 sees two reversals
        coords = [(0.0, 0.0), (1.0, 0.0), (0.0, 0.0), (1.0, 0.0), (0.0, 0.0), (1.0, 0.0)]
        trajectory = make_trajectory(coords)
        assert FeatureExtractor(3).extract(trajectory).straightness_median == pytest.approx(0.5, abs=1e-9)

    def test_matrix_shape(self, make_trajectory):
        extractor = FeatureExtractor()
        trajectories = [make_trajectory([(0.0, 0.0), (0.0, 0.1)]) for _ in range(4)]
        assert extractor.extract_matrix(trajectories).shape == (4, 6)
        assert extractor.extract_matrix([]).shape == (0, 6)

    def test_extract_dict(self, make_trajectory):
        values = FeatureExtractor().extract_dict(make_trajectory([(0.0, 0.0), (0.0, 0.1)]))
        assert list(values) == list(FEATURE_NAMES)

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            FeatureExtractor(0)
