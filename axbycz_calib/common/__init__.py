"""
Common package for AXB = YCZ calibration.

Shared geometry, diagnostics, error types and metrics used by the operators
and the solvers.

Subpackages:
- geometry/: SE(3) geometry operations
"""

from axbycz_calib.common.op_report import OpReport
from axbycz_calib.common.errors import (
    CalibrationError,
    DimensionMismatchError,
    EmptyCandidateSetError,
)
from axbycz_calib.common import metrics

__all__ = [
    "OpReport",
    "CalibrationError",
    "DimensionMismatchError",
    "EmptyCandidateSetError",
    "metrics",
]
