"""
Tests for SE(3) geometry.

Covers hat/vee, the so(3) and se(3) exponential/logarithm on all three
branches (theta near 0, generic, near pi) and the adjoint.
"""

import math

import numpy as np
import pytest

from axbycz_calib.common.geometry import (
    as_transform_stack,
    is_se3,
    make_se3,
    rotmat_to_rotvec,
    rotvec_to_rotmat,
    se3_adjoint,
    se3_exp,
    se3_hat,
    se3_inverse,
    se3_log,
    se3_vee,
    skew,
    unskew,
)


class TestHatVee:
    """Tests for skew/unskew and se3_hat/se3_vee."""

    def test_skew_unskew_roundtrip(self):
        """unskew(skew(v)) should return v."""
        v = np.array([0.1, -2.0, 3.5])
        np.testing.assert_allclose(unskew(skew(v)), v)

    def test_skew_is_cross_product(self):
        """skew(a) @ b should equal a x b."""
        a = np.array([1.0, 2.0, 3.0])
        b = np.array([-0.5, 0.4, 2.0])
        np.testing.assert_allclose(skew(a) @ b, np.cross(a, b))

    def test_unskew_rejects_non_skew(self):
        """A symmetric matrix is a caller bug."""
        with pytest.raises(ValueError, match="skew-symmetric"):
            unskew(np.eye(3))

    def test_se3_hat_vee_roundtrip(self):
        """se3_vee(se3_hat(xi)) should return xi."""
        xi = np.array([0.1, 0.2, 0.3, 1.0, -1.0, 0.5])
        np.testing.assert_allclose(se3_vee(se3_hat(xi)), xi)

    def test_se3_hat_layout(self):
        """Rotation generator fills the 3x3 block, translation the last column."""
        xi = np.array([0.1, 0.2, 0.3, 1.0, -1.0, 0.5])
        Xi = se3_hat(xi)
        np.testing.assert_allclose(Xi[:3, :3], skew(xi[:3]))
        np.testing.assert_allclose(Xi[:3, 3], xi[3:])
        np.testing.assert_allclose(Xi[3], np.zeros(4))


class TestSO3:
    """Tests for rotvec_to_rotmat / rotmat_to_rotvec."""

    def test_identity(self):
        """log(I) should be zero."""
        np.testing.assert_allclose(rotmat_to_rotvec(np.eye(3)), np.zeros(3), atol=1e-15)

    def test_small_angle(self):
        """Angles below the Taylor threshold round-trip."""
        w = np.array([1e-11, -2e-11, 5e-12])
        np.testing.assert_allclose(rotmat_to_rotvec(rotvec_to_rotmat(w)), w, atol=1e-18)

    def test_small_but_representable_angle(self):
        """Angles near 1e-8 keep full relative precision."""
        w = np.array([1e-8, 0.0, 0.0])
        np.testing.assert_allclose(rotmat_to_rotvec(rotvec_to_rotmat(w)), w, rtol=1e-6)

    def test_generic_roundtrip(self):
        """Generic rotation vectors round-trip."""
        w = np.array([0.4, -1.1, 0.7])
        np.testing.assert_allclose(rotmat_to_rotvec(rotvec_to_rotmat(w)), w, atol=1e-12)

    def test_near_pi_keeps_sign(self):
        """Just below pi the recovered axis keeps its sign."""
        axis = np.array([1.0, 2.0, -2.0]) / 3.0
        w = (math.pi - 1e-8) * axis
        np.testing.assert_allclose(rotmat_to_rotvec(rotvec_to_rotmat(w)), w, atol=1e-6)

    def test_exactly_pi(self):
        """At pi either sign is accepted but exp(log(R)) must return R."""
        axis = np.array([0.0, 0.6, 0.8])
        R = rotvec_to_rotmat(math.pi * axis)
        w = rotmat_to_rotvec(R)
        assert abs(np.linalg.norm(w) - math.pi) < 1e-8
        np.testing.assert_allclose(rotvec_to_rotmat(w), R, atol=1e-8)

    def test_rejects_non_orthogonal(self):
        """Non-orthogonal input raises."""
        with pytest.raises(ValueError, match="orthogonal"):
            rotmat_to_rotvec(2.0 * np.eye(3))


class TestSE3:
    """Tests for se3_exp / se3_log and group operations."""

    def test_exp_log_roundtrip(self):
        """log(exp(xi)) == xi for |omega| < pi."""
        xi = np.array([0.3, -0.5, 0.8, 1.2, -0.4, 2.0])
        np.testing.assert_allclose(se3_log(se3_exp(xi)), xi, atol=1e-12)

    def test_log_exp_roundtrip(self, rng):
        """exp(log(T)) == T for random transforms."""
        for _ in range(10):
            xi = rng.normal(size=6)
            T = se3_exp(xi)
            np.testing.assert_allclose(se3_exp(se3_log(T)), T, atol=1e-10)

    def test_near_pi_translation(self):
        """The translation generator survives a rotation close to pi."""
        axis = np.array([0.0, 0.0, 1.0])
        xi = np.concatenate([(math.pi - 1e-4) * axis, [0.3, -0.2, 1.0]])
        np.testing.assert_allclose(se3_log(se3_exp(xi)), xi, atol=1e-8)

    def test_small_rotation(self):
        """Pure translation twists are recovered exactly."""
        xi = np.array([0.0, 0.0, 0.0, 1.0, 2.0, 3.0])
        T = se3_exp(xi)
        np.testing.assert_allclose(T[:3, 3], xi[3:])
        np.testing.assert_allclose(se3_log(T), xi, atol=1e-15)

    def test_exp_is_se3(self):
        """exp lands on SE(3)."""
        assert is_se3(se3_exp(np.array([2.0, 1.0, -0.5, 3.0, 0.0, -1.0])))

    def test_inverse(self):
        """T @ T^{-1} == I."""
        T = se3_exp(np.array([0.3, -0.5, 0.8, 1.2, -0.4, 2.0]))
        np.testing.assert_allclose(T @ se3_inverse(T), np.eye(4), atol=1e-12)

    def test_adjoint_conjugation(self):
        """T exp(xi) T^{-1} == exp(Ad(T) xi)."""
        T = se3_exp(np.array([0.3, -0.5, 0.8, 1.2, -0.4, 2.0]))
        xi = np.array([0.05, 0.1, -0.02, 0.3, 0.0, -0.1])
        lhs = T @ se3_exp(xi) @ se3_inverse(T)
        rhs = se3_exp(se3_adjoint(T) @ xi)
        np.testing.assert_allclose(lhs, rhs, atol=1e-12)

    def test_is_se3_rejects_reflection(self):
        """det(R) = -1 is not a rigid transform."""
        assert not is_se3(make_se3(np.diag([1.0, 1.0, -1.0]), np.zeros(3)))


class TestTransformStack:
    """Tests for as_transform_stack."""

    def test_single_transform(self):
        """A single 4x4 becomes a stack of one."""
        assert as_transform_stack(np.eye(4)).shape == (1, 4, 4)

    def test_list_of_transforms(self):
        """A list of 4x4 becomes (N, 4, 4)."""
        assert as_transform_stack([np.eye(4)] * 3).shape == (3, 4, 4)

    def test_rejects_bad_shape(self):
        """Non-4x4 input raises."""
        with pytest.raises(ValueError):
            as_transform_stack(np.zeros((2, 3, 3)))
