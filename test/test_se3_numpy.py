"""
Tests for NumPy SE(3)/SO(3) primitives.
"""

import math

import numpy as np
import pytest

from quadric_slam.common.geometry.se3_numpy import (
    rotmat_to_rotvec,
    rotvec_to_rotmat,
    se3_apply,
    se3_compose,
    se3_exp,
    se3_generators,
    se3_inverse,
    se3_log,
    se3_relative,
    skew,
    unskew,
)


class TestSO3:
    """Exp/log on rotations."""

    def test_skew_unskew_roundtrip(self):
        v = np.array([0.1, -2.0, 3.5])
        S = skew(v)
        assert np.allclose(S, -S.T)
        assert np.allclose(unskew(S), v)

    def test_rodrigues_is_rotation(self):
        R = rotvec_to_rotmat([0.4, -1.1, 0.7])
        assert np.allclose(R @ R.T, np.eye(3))
        assert np.isclose(np.linalg.det(R), 1.0)

    @pytest.mark.parametrize("rotvec", [
        [0.0, 0.0, 0.0],
        [1e-12, 0.0, 0.0],
        [1e-4, -2e-4, 3e-4],
        [0.3, -0.2, 0.5],
        [1.5, 1.0, -0.5],
    ])
    def test_log_inverts_exp(self, rotvec):
        rotvec = np.asarray(rotvec)
        assert np.allclose(rotmat_to_rotvec(rotvec_to_rotmat(rotvec)), rotvec, atol=1e-10)

    def test_log_near_pi(self):
        """Near θ = π the axis is recovered from the symmetric part with the right sign."""
        axis = np.array([1.0, 2.0, -2.0]) / 3.0
        rotvec = axis * (math.pi - 1e-7)
        assert np.allclose(rotmat_to_rotvec(rotvec_to_rotmat(rotvec)), rotvec, atol=1e-6)

    def test_log_rejects_non_orthogonal(self):
        with pytest.raises(ValueError):
            rotmat_to_rotvec(np.diag([1.0, 2.0, 1.0]))

    def test_log_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            rotmat_to_rotvec(np.eye(4))


class TestSE3:
    """Exp/log and group operations on homogeneous transforms."""

    @pytest.mark.parametrize("xi", [
        [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        [1.0, -2.0, 0.5, 0.0, 0.0, 0.0],
        [0.1, 0.2, 0.3, 0.01, -0.02, 0.03],
        [1.0, -0.5, 2.0, 1.2, -0.8, 1.5],
    ])
    def test_log_inverts_exp(self, xi):
        xi = np.asarray(xi)
        T = se3_exp(xi)
        assert T.shape == (4, 4)
        assert np.allclose(se3_log(T), xi, atol=1e-10)

    def test_exp_pure_translation(self):
        T = se3_exp([1.0, 2.0, 3.0, 0.0, 0.0, 0.0])
        assert np.allclose(T[:3, :3], np.eye(3))
        assert np.allclose(T[:3, 3], [1.0, 2.0, 3.0])

    def test_compose_with_inverse_is_identity(self):
        T = se3_exp([0.5, -1.0, 2.0, 0.3, 0.2, -0.1])
        assert np.allclose(se3_compose(T, se3_inverse(T)), np.eye(4))
        assert np.allclose(se3_compose(se3_inverse(T), T), np.eye(4))

    def test_apply_single_and_batch(self):
        T = se3_exp([0.5, -1.0, 2.0, 0.3, 0.2, -0.1])
        pts = np.array([[1.0, 0.0, 0.0], [0.0, 2.0, -1.0]])
        batch = se3_apply(T, pts)
        assert batch.shape == (2, 3)
        for p, q in zip(pts, batch):
            assert np.allclose(se3_apply(T, p), q)

    def test_apply_rejects_bad_points(self):
        with pytest.raises(ValueError):
            se3_apply(np.eye(4), np.zeros(4))

    def test_exp_rejects_bad_twist(self):
        with pytest.raises(ValueError):
            se3_exp(np.zeros(5))

    def test_generators_are_exp_derivatives(self):
        """G[k] matches the central difference of exp at zero."""
        G = se3_generators()
        h = 1e-6
        for k in range(6):
            d = np.zeros(6)
            d[k] = h
            numeric = (se3_exp(d) - se3_exp(-d)) / (2 * h)
            assert np.allclose(numeric, G[k], atol=1e-8)

    def test_relative(self):
        T_a = se3_exp([0.5, -1.0, 2.0, 0.3, 0.2, -0.1])
        T_b = se3_exp([1.0, 0.0, -1.0, -0.2, 0.4, 0.0])
        T_rel = se3_relative(T_a, T_b)
        assert np.allclose(se3_compose(T_a, T_rel), T_b)
