"""
KarcherMeanCov operator.

Intrinsic (Karcher / Fréchet) mean and tangent-space covariance of a set of
SE(3) samples.

Algorithm:
1. Seed: exp of the arithmetic average of log(X_i)
2. Iterate: mean <- mean @ exp(avg_i log(mean^{-1} X_i)) until the averaged
   residual norm drops below the tolerance or the iteration cap is reached
3. Covariance: population covariance (divided by N, not N-1) of the residuals
   log(mean^{-1} X_i) at the final mean

Reaching the iteration cap is non-fatal: the last estimate is returned with
converged=False and a "MeanIterationCap" trigger on the report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from axbycz_calib import constants
from axbycz_calib.common.errors import DimensionMismatchError
from axbycz_calib.common.geometry.se3_numpy import (
    TransformStackLike,
    as_transform_stack,
    se3_exp,
    se3_inverse,
    se3_log,
)
from axbycz_calib.common.op_report import OpReport

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class ManifoldStatistics:
    """Intrinsic mean and (ω, v)-ordered 6x6 covariance of an SE(3) sample set."""
    mean: np.ndarray  # (4, 4)
    covariance: np.ndarray  # (6, 6)
    n_samples: int
    iterations: int
    residual_norm: float
    converged: bool


# =============================================================================
# Helpers
# =============================================================================


def _tangent_residuals(mean: np.ndarray, samples: np.ndarray) -> np.ndarray:
    """Stack log(mean^{-1} X_i) as rows of an (N, 6) array."""
    mean_inv = se3_inverse(mean)
    return np.stack([se3_log(mean_inv @ X) for X in samples], axis=0)


# =============================================================================
# Main Operator
# =============================================================================


def compute_mean_and_covariance(
    samples: TransformStackLike,
    tolerance: float = constants.MEAN_TOLERANCE,
    max_iterations: int = constants.MEAN_MAX_ITERATIONS,
) -> Tuple[ManifoldStatistics, OpReport]:
    """
    Compute the Karcher mean and covariance of SE(3) samples.

    Args:
        samples: (N, 4, 4) array or sequence of 4x4 transforms, N >= 1
        tolerance: Stop when ||avg residual|| < tolerance
        max_iterations: Iteration cap

    Returns:
        Tuple of (ManifoldStatistics, OpReport)

    Raises:
        DimensionMismatchError: If the sample set is empty
    """
    if len(samples) == 0:
        raise DimensionMismatchError("Cannot compute statistics of an empty sample set")
    stack = as_transform_stack(samples)
    n = stack.shape[0]

    # Seed: first-order approximation, valid for clustered samples
    log_avg = np.mean(np.stack([se3_log(X) for X in stack], axis=0), axis=0)
    mean = se3_exp(log_avg)

    converged = False
    iterations = 0
    residual_norm = float("inf")
    while iterations < max_iterations:
        iterations += 1
        step = np.mean(_tangent_residuals(mean, stack), axis=0)
        mean = mean @ se3_exp(step)
        residual_norm = float(np.linalg.norm(step))
        if residual_norm < tolerance:
            converged = True
            break

    residuals = _tangent_residuals(mean, stack)
    covariance = residuals.T @ residuals / n

    report = OpReport(
        name="KarcherMeanCov",
        exact=True,
        solver_used="KarcherMean",
        metrics={
            "n_samples": n,
            "iterations": iterations,
            "residual_norm": residual_norm,
        },
    )
    if not converged:
        report.add_trigger("MeanIterationCap")
        report.notes = f"Mean did not converge in {max_iterations} iterations; returning last estimate"
        logger.warning(
            "Karcher mean did not converge after %d iterations (residual %.3e >= %.1e)",
            iterations, residual_norm, tolerance,
        )
    else:
        logger.debug("Karcher mean converged in %d iterations (residual %.3e)", iterations, residual_norm)

    stats = ManifoldStatistics(
        mean=mean,
        covariance=covariance,
        n_samples=n,
        iterations=iterations,
        residual_norm=residual_norm,
        converged=converged,
    )
    return stats, report
