"""
SE(3) geometry using homogeneous matrices and Lie algebra coordinates.

Group representation: 4x4 homogeneous matrix
    [[R, t],
     [0, 1]]
with R in SO(3) and t in R^3.

Tangent representation: 6-vector (wx, wy, wz, vx, vy, vz) where:
- (wx, wy, wz): rotation generator in so(3) (axis * angle)
- (vx, vy, vz): translation generator

The rotation generator comes FIRST so that the top-left 3x3 block of a 6x6
tangent covariance is the rotational block.

Numerical Policy:
    Epsilon thresholds are chosen based on IEEE 754 double precision:
    - ROTATION_EPSILON = 1e-10: switch to Taylor expansions near theta = 0
    - SINGULARITY_EPSILON = 1e-6: switch to the symmetric-part axis near theta = pi

    These are NUMERICAL STABILITY choices, not model parameters.
    They affect only the computational path, not the mathematical result.

    The rotation angle is always recovered with atan2(sin, cos) rather than
    acos(cos), which loses half the significant digits near theta = 0.

References:
- Barfoot (2017): State Estimation for Robotics
- Sola et al. (2018): A micro Lie theory for state estimation
- Chirikjian (2011): Stochastic Models, Information Theory, and Lie Groups, Vol. 2
"""

from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np

from axbycz_calib.constants import (
    ORTHONORMALITY_TOLERANCE,
    ROTATION_EPSILON,
    SINGULARITY_EPSILON,
    SKEW_TOLERANCE,
)

TransformStackLike = Union[np.ndarray, Sequence[np.ndarray]]


# =============================================================================
# so(3) <-> R^3 (hat / vee)
# =============================================================================


def skew(v: np.ndarray) -> np.ndarray:
    """Skew-symmetric matrix from 3-vector (hat operator)."""
    v = np.asarray(v, dtype=float).reshape(-1)
    if len(v) != 3:
        raise ValueError(f"Expected 3-vector, got shape {v.shape}")
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0]
    ], dtype=float)


def unskew(S: np.ndarray, atol: float = SKEW_TOLERANCE) -> np.ndarray:
    """
    Extract 3-vector from skew-symmetric matrix (vee operator).

    A matrix that is not skew-symmetric within `atol` is a caller bug and
    raises ValueError.
    """
    S = np.asarray(S, dtype=float)
    if S.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {S.shape}")
    if not np.allclose(S, -S.T, atol=atol):
        raise ValueError("Input matrix is not skew-symmetric (S != -S.T)")
    return np.array([S[2, 1], S[0, 2], S[1, 0]], dtype=float)


# =============================================================================
# Rotation vector <-> Rotation matrix (so(3) <-> SO(3))
# =============================================================================


def rotvec_to_rotmat(rotvec: np.ndarray) -> np.ndarray:
    """
    Convert rotation vector (axis-angle) to rotation matrix.
    Uses Rodrigues' formula: R = I + sin(θ)[ω]_× + (1-cos(θ))[ω]_×²

    This is the exponential map exp: so(3) -> SO(3).
    """
    rotvec = np.asarray(rotvec, dtype=float).reshape(-1)
    theta = np.linalg.norm(rotvec)
    W = skew(rotvec)

    if theta < ROTATION_EPSILON:
        # Second-order Taylor: R ≈ I + W + W²/2
        return np.eye(3, dtype=float) + W + 0.5 * (W @ W)

    K = W / theta
    return np.eye(3, dtype=float) + math.sin(theta) * K + (1.0 - math.cos(theta)) * (K @ K)


def rotmat_to_rotvec(R: np.ndarray) -> np.ndarray:
    """
    Convert rotation matrix to rotation vector (axis-angle).
    This is the logarithmic map log: SO(3) -> so(3), principal branch θ ∈ [0, π].

    Handles three cases:
    1. θ ≈ 0: Extract from skew-symmetric part (first order)
    2. θ ≈ π: Axis from the symmetric part, sign from the skew part
    3. Otherwise: Standard formula
    """
    R = np.asarray(R, dtype=float)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    RRT = R @ R.T
    if not np.allclose(RRT, np.eye(3), atol=ORTHONORMALITY_TOLERANCE):
        raise ValueError("Input matrix is not orthogonal (R @ R.T != I)")

    # sin(θ) * axis
    w = unskew((R - R.T) / 2.0)
    sin_theta = float(np.linalg.norm(w))
    cos_theta = float(np.clip((np.trace(R) - 1.0) / 2.0, -1.0, 1.0))
    theta = math.atan2(sin_theta, cos_theta)

    if theta < ROTATION_EPSILON:
        # Case 1: log(R) ≈ (R - R.T) / 2
        return w

    if math.pi - theta < SINGULARITY_EPSILON:
        # Case 2: (R + R.T) / 2 = cos(θ) I + (1 - cos(θ)) a a^T, so the axis is
        # the eigenvector of the largest eigenvalue. The skew part still
        # carries the sign unless θ is exactly π, where ±a are equivalent.
        _, eigvecs = np.linalg.eigh((R + R.T) / 2.0)
        axis = eigvecs[:, -1]
        axis = axis / np.linalg.norm(axis)
        if float(np.dot(axis, w)) < 0.0:
            axis = -axis
        return axis * theta

    # Case 3: log(R) = θ / sin(θ) * (R - R.T) / 2
    return w * (theta / sin_theta)


# =============================================================================
# se(3) <-> R^6 (hat / vee)
# =============================================================================


def se3_hat(xi: np.ndarray) -> np.ndarray:
    """4x4 Lie algebra element from twist (ω, v)."""
    xi = np.asarray(xi, dtype=float).reshape(-1)
    if len(xi) != 6:
        raise ValueError(f"Expected 6D twist, got shape {xi.shape}")
    Xi = np.zeros((4, 4), dtype=float)
    Xi[:3, :3] = skew(xi[:3])
    Xi[:3, 3] = xi[3:6]
    return Xi


def se3_vee(Xi: np.ndarray) -> np.ndarray:
    """Twist (ω, v) from 4x4 Lie algebra element."""
    Xi = np.asarray(Xi, dtype=float)
    if Xi.shape != (4, 4):
        raise ValueError(f"Expected 4x4 matrix, got shape {Xi.shape}")
    return np.concatenate([unskew(Xi[:3, :3]), Xi[:3, 3]])


# =============================================================================
# SE(3) group operations
# =============================================================================


def make_se3(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Assemble a homogeneous transform from a rotation block and translation."""
    R = np.asarray(R, dtype=float)
    t = np.asarray(t, dtype=float).reshape(-1)
    if R.shape != (3, 3) or len(t) != 3:
        raise ValueError(f"Expected 3x3 rotation and 3-vector, got shapes {R.shape}, {t.shape}")
    T = np.eye(4, dtype=float)
    T[:3, :3] = R
    T[:3, 3] = t
    return T


def is_se3(T: np.ndarray, atol: float = ORTHONORMALITY_TOLERANCE) -> bool:
    """True if T is a 4x4 homogeneous matrix with a proper rotation block."""
    T = np.asarray(T, dtype=float)
    if T.shape != (4, 4):
        return False
    if not np.allclose(T[3], [0.0, 0.0, 0.0, 1.0], atol=atol):
        return False
    R = T[:3, :3]
    if not np.allclose(R @ R.T, np.eye(3), atol=atol):
        return False
    return bool(np.linalg.det(R) > 0.0)


def se3_inverse(T: np.ndarray) -> np.ndarray:
    """
    Compute inverse of SE(3) transform: T_inv such that T @ T_inv = I.

    Uses the closed form [R^T, -R^T t] instead of a general matrix inverse.
    """
    T = np.asarray(T, dtype=float)
    if T.shape != (4, 4):
        raise ValueError(f"Expected 4x4 transform, got shape {T.shape}")
    R_inv = T[:3, :3].T
    return make_se3(R_inv, -R_inv @ T[:3, 3])


def se3_adjoint(T: np.ndarray) -> np.ndarray:
    """
    Compute adjoint representation of SE(3) transform.

    For twists ordered (ω, v):
        Ad(T) = [R,       0]
                [[t]_× R, R]

    so that T exp(ξ) T^{-1} = exp(Ad(T) ξ) and
        Cov(T ξ T^{-1}) = Ad(T) Cov(ξ) Ad(T)^T
    """
    T = np.asarray(T, dtype=float)
    if T.shape != (4, 4):
        raise ValueError(f"Expected 4x4 transform, got shape {T.shape}")
    R = T[:3, :3]
    Ad = np.zeros((6, 6), dtype=float)
    Ad[:3, :3] = R
    Ad[3:6, :3] = skew(T[:3, 3]) @ R
    Ad[3:6, 3:6] = R
    return Ad


def se3_exp(xi: np.ndarray) -> np.ndarray:
    """
    Exponential map: se(3) -> SE(3).

    Args:
        xi: 6D twist vector (ωx, ωy, ωz, vx, vy, vz)

    Returns:
        4x4 homogeneous transform
    """
    xi = np.asarray(xi, dtype=float).reshape(-1)
    if len(xi) != 6:
        raise ValueError(f"Expected 6D twist, got shape {xi.shape}")

    omega = xi[:3]
    v = xi[3:6]
    theta = np.linalg.norm(omega)
    W = skew(omega)
    W2 = W @ W

    if theta < ROTATION_EPSILON:
        R = np.eye(3, dtype=float) + W + 0.5 * W2
        V = np.eye(3, dtype=float) + 0.5 * W
    else:
        a = math.sin(theta) / theta
        b = (1.0 - math.cos(theta)) / (theta * theta)
        c = (theta - math.sin(theta)) / (theta * theta * theta)
        R = np.eye(3, dtype=float) + a * W + b * W2
        V = np.eye(3, dtype=float) + b * W + c * W2

    return make_se3(R, V @ v)


def se3_log(T: np.ndarray) -> np.ndarray:
    """
    Logarithmic map: SE(3) -> se(3).

    Inverse of se3_exp on the principal branch (rotation angle in [0, π]).
    At θ = π the rotation generator is only defined up to sign.

    Args:
        T: 4x4 homogeneous transform

    Returns:
        6D twist vector (ωx, ωy, ωz, vx, vy, vz)
    """
    T = np.asarray(T, dtype=float)
    if T.shape != (4, 4):
        raise ValueError(f"Expected 4x4 transform, got shape {T.shape}")

    omega = rotmat_to_rotvec(T[:3, :3])
    theta = np.linalg.norm(omega)
    W = skew(omega)

    if theta < ROTATION_EPSILON:
        V_inv = np.eye(3, dtype=float) - 0.5 * W + (W @ W) / 12.0
    else:
        half = 0.5 * theta
        coeff = (1.0 - half * math.cos(half) / math.sin(half)) / (theta * theta)
        V_inv = np.eye(3, dtype=float) - 0.5 * W + coeff * (W @ W)

    v = V_inv @ T[:3, 3]
    return np.concatenate([omega, v])


def as_transform_stack(samples: TransformStackLike) -> np.ndarray:
    """
    Coerce a single transform or a sequence of transforms to an (N, 4, 4) array.

    Raises:
        ValueError: If the trailing dimensions are not 4x4
    """
    stack = np.asarray(samples, dtype=float)
    if stack.ndim == 2:
        stack = stack[None, :, :]
    if stack.ndim != 3 or stack.shape[1:] != (4, 4):
        raise ValueError(f"Expected 4x4 transform(s), got shape {stack.shape}")
    return stack
