"""
Geometry package for AXB = YCZ calibration.

SE(3) operations on 4x4 homogeneous matrices with (ω, v) tangent coordinates.

Modules:
- se3_numpy: NumPy-based SO(3)/SE(3) exp/log, hat/vee, inverse, adjoint

Usage:
    from axbycz_calib.common.geometry import (
        se3_exp,
        se3_log,
        se3_inverse,
        skew,
        unskew,
    )
"""

from __future__ import annotations

from axbycz_calib.common.geometry.se3_numpy import (
    # so(3) operations
    skew,
    unskew,
    rotvec_to_rotmat,
    rotmat_to_rotvec,
    # se(3) operations
    se3_hat,
    se3_vee,
    # SE(3) operations
    make_se3,
    is_se3,
    se3_inverse,
    se3_adjoint,
    se3_exp,
    se3_log,
    as_transform_stack,
)

__all__ = [
    # so(3) operations
    "skew",
    "unskew",
    "rotvec_to_rotmat",
    "rotmat_to_rotvec",
    # se(3) operations
    "se3_hat",
    "se3_vee",
    # SE(3) operations
    "make_se3",
    "is_se3",
    "se3_inverse",
    "se3_adjoint",
    "se3_exp",
    "se3_log",
    "as_transform_stack",
]
