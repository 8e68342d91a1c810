"""
AXB = YCZ solvers.

- prob1: two data sets (A fixed, C fixed); Y derived from the mean equations
- prob2: three data sets (A fixed, C fixed, B fixed); X, Y, Z from hypotheses
"""

from axbycz_calib.solvers.base import CalibrationResult
from axbycz_calib.solvers.prob1 import axbycz_prob1
from axbycz_calib.solvers.prob2 import axbycz_prob2

__all__ = [
    "CalibrationResult",
    "axbycz_prob1",
    "axbycz_prob2",
]
