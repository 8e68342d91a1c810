"""
Error metrics between rigid transforms.

rotation_error and translation_error are the cost primitives of candidate
selection. loop_closure_residual scores a calibration against corresponded
data streams.
"""

from __future__ import annotations

import numpy as np

from axbycz_calib.common.errors import DimensionMismatchError
from axbycz_calib.common.geometry.se3_numpy import (
    TransformStackLike,
    as_transform_stack,
    rotmat_to_rotvec,
)


def rotation_error(T_left: np.ndarray, T_right: np.ndarray) -> float:
    """Geodesic angle (radians) between the rotation blocks of two transforms."""
    R_left = np.asarray(T_left, dtype=float)[:3, :3]
    R_right = np.asarray(T_right, dtype=float)[:3, :3]
    return float(np.linalg.norm(rotmat_to_rotvec(R_left.T @ R_right)))


def translation_error(T_left: np.ndarray, T_right: np.ndarray) -> float:
    """Euclidean distance between the translation blocks of two transforms."""
    t_left = np.asarray(T_left, dtype=float)[:3, 3]
    t_right = np.asarray(T_right, dtype=float)[:3, 3]
    return float(np.linalg.norm(t_left - t_right))


def loop_closure_residual(
    A: TransformStackLike,
    B: TransformStackLike,
    C: TransformStackLike,
    X: np.ndarray,
    Y: np.ndarray,
    Z: np.ndarray,
) -> float:
    """
    Mean Frobenius norm of A_i X B_i - Y C_i Z over corresponded triples.

    Raises:
        DimensionMismatchError: If the three streams differ in length
    """
    A = as_transform_stack(A)
    B = as_transform_stack(B)
    C = as_transform_stack(C)
    if not (len(A) == len(B) == len(C)):
        raise DimensionMismatchError(
            f"Corresponded streams must have equal length, got {len(A)}, {len(B)}, {len(C)}"
        )

    lhs = A @ X @ B
    rhs = Y @ C @ Z
    return float(np.mean(np.linalg.norm(lhs - rhs, ord="fro", axis=(1, 2))))
