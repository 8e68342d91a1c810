"""
Error taxonomy for calibration solves.

Structural failures propagate as exceptions. Numerical degeneracy and
convergence problems are not errors: they are logged and recorded on the
operator's OpReport, and processing continues.
"""

from __future__ import annotations


class CalibrationError(ValueError):
    """Base class for calibration failures that abort a solve."""


class EmptyCandidateSetError(CalibrationError):
    """No SE(3)-valid candidate survived for one of the unknowns."""

    def __init__(self, unknown: str, detail: str = ""):
        self.unknown = unknown
        message = f"No solution found: candidate set for {unknown} is empty"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DimensionMismatchError(CalibrationError):
    """Sample sets that require per-index correspondence differ in length or shape."""
