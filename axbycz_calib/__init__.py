"""
Probabilistic AXB = YCZ calibration on SE(3).

Recovers the unknown transforms X, Y, Z from streams of A, B, C without
requiring per-index correspondence, using Karcher means and tangent
covariances of each stream.

Subpackages:
- common/: SE(3) geometry, OpReport, errors, metrics, parameter models
- operators/: mean/covariance, hypothesis generation, candidate selection
- solvers/: the two- and three-data-set solvers
"""

from axbycz_calib.config import SolverConfig, load_solver_config
from axbycz_calib.solvers import CalibrationResult, axbycz_prob1, axbycz_prob2

__all__ = [
    "SolverConfig",
    "load_solver_config",
    "CalibrationResult",
    "axbycz_prob1",
    "axbycz_prob2",
]
