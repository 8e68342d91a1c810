"""
End-to-end tests for the AXB = YCZ solvers on simulated data.
"""

import numpy as np
import pytest

from axbycz_calib import CalibrationResult, SolverConfig, axbycz_prob1, axbycz_prob2
from axbycz_calib.common.errors import DimensionMismatchError
from axbycz_calib.common.metrics import rotation_error, translation_error
from axbycz_calib.simulation import generate_abc, sensor_noise


def _prob1_data(rng, ground_truth, perturbation, n=50, noise=0.0):
    X, Y, Z = ground_truth
    mean, cov = perturbation
    A1, B1, C1 = generate_abc(n, 1, mean, cov, X, Y, Z, rng)
    A2, B2, C2 = generate_abc(n, 3, mean, cov, X, Y, Z, rng)
    if noise > 0.0:
        B1 = sensor_noise(B1, noise, rng)
        B2 = sensor_noise(B2, noise, rng)
    return A1, B1, C1, A2, B2, C2


def _prob2_data(rng, ground_truth, perturbation, n=50, noise=0.0):
    X, Y, Z = ground_truth
    mean, cov = perturbation
    A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation, n, noise)
    A3, B3, C3 = generate_abc(n, 2, mean, cov, X, Y, Z, rng)
    if noise > 0.0:
        C3 = sensor_noise(C3, noise, rng)
    return A1, B1, C1, A2, B2, C2, A3, B3, C3


def _assert_close(estimate, truth, rot_tol, trans_tol):
    assert rotation_error(estimate, truth) < rot_tol
    assert translation_error(estimate, truth) < trans_tol


class TestProb1:
    """Tests for axbycz_prob1."""

    def test_noise_free_recovery(self, rng, ground_truth, perturbation):
        """Noise-free data recovers (X, Y, Z)."""
        X, Y, Z = ground_truth
        result = axbycz_prob1(*_prob1_data(rng, ground_truth, perturbation))
        assert isinstance(result, CalibrationResult)
        _assert_close(result.X, X, 1e-3, 1e-3)
        _assert_close(result.Y, Y, 1e-3, 1e-3)
        _assert_close(result.Z, Z, 1e-3, 1e-3)
        assert result.cost < 1e-3
        assert result.converged

    def test_table_shape(self, rng, ground_truth, perturbation):
        """Y comes from two equations at every (X, Z) pair."""
        result = axbycz_prob1(*_prob1_data(rng, ground_truth, perturbation))
        assert result.cost_table.costs.shape == (4, 2 * 4 * 4, 4)

    def test_fixed_frames_as_single_transforms(self, rng, ground_truth, perturbation):
        """Fixed frames may be passed as a single 4x4."""
        X, _, _ = ground_truth
        A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation)
        result = axbycz_prob1(A1[0], B1, C1, A2, B2, C2[0])
        _assert_close(result.X, X, 1e-3, 1e-3)

    def test_data_sets_may_differ_in_length(self, rng, ground_truth, perturbation):
        """The two data sets need not have the same number of samples."""
        X, Y, Z = ground_truth
        A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation, n=60)
        result = axbycz_prob1(A1[0], B1[:40], C1[:40], A2[:45], B2[:45], C2[0])
        assert result.statistics["B1"].n_samples == 40
        assert result.statistics["A2"].n_samples == 45
        _assert_close(result.X, X, 1e-3, 1e-3)
        _assert_close(result.Y, Y, 1e-3, 1e-3)
        _assert_close(result.Z, Z, 1e-3, 1e-3)

    def test_uncorresponded_streams_stay_on_true_branch(self, rng, ground_truth, perturbation):
        """Streams of unequal length only add sampling error to the estimate."""
        X, _, Z = ground_truth
        A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation, n=60)
        result = axbycz_prob1(A1[0], B1[:40], C1, A2, B2[:45], C2[0])
        assert result.statistics["B1"].n_samples == 40
        assert result.statistics["C1"].n_samples == 60
        assert result.cost == result.cost_table.costs.min()
        _assert_close(result.Z, Z, 0.35, 0.25)
        # the other valid candidates sit a half turn away
        assert rotation_error(result.X, X) < 1.0

    @pytest.mark.parametrize("seed", range(5))
    def test_sensor_noise_recovery(self, seed, ground_truth, perturbation):
        """sigma = 0.01 sensor noise on B with N = 50 stays within 0.05."""
        X, Y, Z = ground_truth
        rng = np.random.default_rng(seed)
        result = axbycz_prob1(*_prob1_data(rng, ground_truth, perturbation, n=50, noise=0.01))
        _assert_close(result.X, X, 0.05, 0.05)
        _assert_close(result.Y, Y, 0.05, 0.05)
        _assert_close(result.Z, Z, 0.05, 0.05)

    def test_cost_grows_with_noise(self, ground_truth, perturbation):
        """The minimum cost increases with sensor noise."""
        averages = []
        for noise in (0.0, 0.01, 0.1):
            costs = []
            for seed in range(5):
                rng = np.random.default_rng(seed)
                result = axbycz_prob1(*_prob1_data(rng, ground_truth, perturbation, noise=noise))
                costs.append(result.cost)
            averages.append(np.mean(costs))
        assert averages[0] < averages[1] < averages[2]

    def test_reports_attached(self, rng, ground_truth, perturbation):
        """Every operator report validates."""
        result = axbycz_prob1(*_prob1_data(rng, ground_truth, perturbation))
        assert [r.name for r in result.reports][-1] == "ExhaustiveSelection"
        for r in result.reports:
            r.validate()

    def test_mismatched_fixed_sequence_raises(self, rng, ground_truth, perturbation):
        """A fixed frame given as a sequence must match its data set length."""
        A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation)
        with pytest.raises(DimensionMismatchError):
            axbycz_prob1(A1[:10], B1, C1, A2, B2, C2)

    def test_empty_stream_raises(self, rng, ground_truth, perturbation):
        """An empty free stream is a dimension mismatch."""
        A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation)
        with pytest.raises(DimensionMismatchError):
            axbycz_prob1(A1[0], [], C1, A2, B2, C2[0])

    def test_bad_shape_raises(self, rng, ground_truth, perturbation):
        """Non-4x4 samples are rejected."""
        A1, B1, C1, A2, B2, C2 = _prob1_data(rng, ground_truth, perturbation)
        with pytest.raises(DimensionMismatchError):
            axbycz_prob1(A1[0], B1[:, :3, :3], C1, A2, B2, C2[0])


class TestProb2:
    """Tests for axbycz_prob2."""

    def test_noise_free_recovery(self, rng, ground_truth, perturbation):
        """Noise-free data recovers (X, Y, Z)."""
        X, Y, Z = ground_truth
        result = axbycz_prob2(*_prob2_data(rng, ground_truth, perturbation))
        _assert_close(result.X, X, 1e-3, 1e-3)
        _assert_close(result.Y, Y, 1e-3, 1e-3)
        _assert_close(result.Z, Z, 1e-3, 1e-3)
        assert result.cost < 1e-3

    def test_dense_table(self, rng, ground_truth, perturbation):
        """All three unknowns contribute four candidates each."""
        result = axbycz_prob2(*_prob2_data(rng, ground_truth, perturbation))
        assert result.cost_table.costs.shape == (4, 4, 4)
        assert result.cost == result.cost_table.costs.min()

    def test_sensor_noise_recovery(self, rng, ground_truth, perturbation):
        """Small sensor noise keeps the estimate close."""
        X, Y, Z = ground_truth
        result = axbycz_prob2(*_prob2_data(rng, ground_truth, perturbation, n=50, noise=0.01))
        _assert_close(result.X, X, 0.05, 0.1)
        _assert_close(result.Y, Y, 0.05, 0.1)
        _assert_close(result.Z, Z, 0.05, 0.1)

    def test_noise_floor_preset(self, rng, ground_truth, perturbation, base_config_path, preset_path):
        """The prob2 preset (noise-floor subtraction on) still recovers the truth."""
        from axbycz_calib.config import load_solver_config
        X, Y, Z = ground_truth
        config = load_solver_config(base_config_path, preset_path("prob2"))
        result = axbycz_prob2(*_prob2_data(rng, ground_truth, perturbation), config=config)
        _assert_close(result.X, X, 1e-2, 1e-2)
        _assert_close(result.Y, Y, 1e-2, 1e-2)
        _assert_close(result.Z, Z, 1e-2, 1e-2)

    def test_default_weight(self, rng, ground_truth, perturbation):
        """prob2 defaults to the heavier translation weight."""
        assert SolverConfig.prob2_defaults().cost.translation_weight == 1.8
        result = axbycz_prob2(*_prob2_data(rng, ground_truth, perturbation))
        assert result.reports[-1].metrics["translation_weight"] == 1.8

    def test_mismatched_fixed_sequence_raises(self, rng, ground_truth, perturbation):
        """A B3 sequence shorter than A3/C3 is rejected."""
        data = list(_prob2_data(rng, ground_truth, perturbation))
        data[7] = data[7][:5]
        with pytest.raises(DimensionMismatchError):
            axbycz_prob2(*data)
