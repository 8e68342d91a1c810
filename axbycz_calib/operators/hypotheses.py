"""
Hypothesis generation for A X = Y B from second-order statistics.

If B_i = Y^{-1} A_i X, the tangent covariances satisfy
    Σ_B = Ad(X^{-1}) Σ_A Ad(X^{-1})^T
so the rotational blocks are related by Σ_B^rr = R^T Σ_A^rr R. Aligning the
eigenbases of the two rotational blocks fixes R up to the sign ambiguity of
each eigenvector, giving eight candidates R = V_A Q V_B^T. The translation
follows from the cross block:
    (R^T Σ_A^rr R)^{-1} (Σ_B^rt - R^T Σ_A^rt R) = [R^T t]_×
and the companion is Y = M_A X M_B^{-1}.

Exactly four of the eight candidates have det(R) = +1 when both eigenbases
are orthonormal; only those are valid SE(3) hypotheses.

References:
- Ma, Li, Chirikjian (2016): New probabilistic approaches to the AX = XB
  hand-eye calibration without correspondence
- Ma, Goh, Ruan, Chirikjian (2018): Probabilistic approaches to the
  AXB = YCZ calibration problem in multi-robot systems
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from scipy import linalg

from axbycz_calib import constants
from axbycz_calib.common.geometry.se3_numpy import (
    TransformStackLike,
    make_se3,
    se3_inverse,
    unskew,
)
from axbycz_calib.common.op_report import OpReport
from axbycz_calib.config import HypothesisConfig, MeanConfig
from axbycz_calib.operators.mean_cov import ManifoldStatistics, compute_mean_and_covariance

logger = logging.getLogger(__name__)


# =============================================================================
# Sign Ambiguity Table
# =============================================================================


def _frozen(M: np.ndarray) -> np.ndarray:
    M.setflags(write=False)
    return M


# Proper sign matrices (det = +1): identity and the three double flips
SIGN_MATRICES: Tuple[np.ndarray, ...] = (
    _frozen(np.diag([1.0, 1.0, 1.0])),
    _frozen(np.diag([-1.0, -1.0, 1.0])),
    _frozen(np.diag([-1.0, 1.0, -1.0])),
    _frozen(np.diag([1.0, -1.0, -1.0])),
)

# Full table: the four proper matrices followed by their negations
HYPOTHESIS_SIGNS: Tuple[np.ndarray, ...] = SIGN_MATRICES + tuple(
    _frozen(-Q) for Q in SIGN_MATRICES
)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class Hypothesis:
    """One rotation+translation candidate for X and its companion Y."""
    rotation: np.ndarray  # (3, 3)
    translation: np.ndarray  # (3,)
    valid: bool  # det(rotation) > 0
    transform: np.ndarray  # (4, 4) X candidate
    companion: np.ndarray  # (4, 4) Y = M_A X M_B^{-1}


@dataclass(frozen=True)
class HypothesisSet:
    """All eight candidates produced from one pair of statistics."""
    hypotheses: Tuple[Hypothesis, ...]
    eigenvalues_a: np.ndarray  # ascending, after noise-floor subtraction
    eigenvalues_b: np.ndarray
    degenerate: bool

    @property
    def n_valid(self) -> int:
        return sum(1 for h in self.hypotheses if h.valid)

    def valid_transforms(self) -> List[np.ndarray]:
        """X candidates that passed the SE(3) determinant check, in table order."""
        return [h.transform for h in self.hypotheses if h.valid]

    def valid_companions(self) -> List[np.ndarray]:
        """Y companions of the valid X candidates, in table order."""
        return [h.companion for h in self.hypotheses if h.valid]


@dataclass(frozen=True)
class BatchSolveResult:
    """Result of batch_solve_xy."""
    stats_a: ManifoldStatistics
    stats_b: ManifoldStatistics
    hypotheses: HypothesisSet


# =============================================================================
# Helpers
# =============================================================================


def sorted_eigenbasis(block: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Eigendecompose a symmetric 3x3 block with eigenvalues sorted ascending.

    The block is symmetrized first; indefinite blocks are allowed.
    """
    sym = 0.5 * (block + block.T)
    eigvals, eigvecs = linalg.eigh(sym)
    order = np.argsort(eigvals, kind="stable")
    return eigvals[order], eigvecs[:, order]


def _has_repeated_eigenvalues(eigvals: np.ndarray) -> bool:
    scale = max(float(np.max(np.abs(eigvals))), 1.0e-300)
    return bool(np.min(np.diff(eigvals)) <= constants.EIGEN_GAP_EPSILON * scale)


# =============================================================================
# Main Operators
# =============================================================================


def generate_hypotheses(
    stats_a: ManifoldStatistics,
    stats_b: ManifoldStatistics,
    noise_std_a: float = constants.DEFAULT_NOISE_STD,
    noise_std_b: float = constants.DEFAULT_NOISE_STD,
    subtract_noise_floor: bool = constants.DEFAULT_SUBTRACT_NOISE_FLOOR,
) -> Tuple[HypothesisSet, OpReport]:
    """
    Generate the eight (X, Y) candidates relating two distributions.

    Never raises on degenerate statistics: singular or indefinite blocks are
    logged, flagged on the report, and processed best-effort.

    Args:
        stats_a: Statistics of the A stream
        stats_b: Statistics of the B stream
        noise_std_a: Noise floor subtracted from Σ_A (times I_6)
        noise_std_b: Noise floor subtracted from Σ_B (times I_6)
        subtract_noise_floor: Apply the noise-floor subtraction

    Returns:
        Tuple of (HypothesisSet, OpReport)
    """
    report = OpReport(name="EigenbasisHypotheses", exact=True, closed_form=True)

    sig_a = np.array(stats_a.covariance, dtype=float)
    sig_b = np.array(stats_b.covariance, dtype=float)
    if subtract_noise_floor:
        sig_a = sig_a - noise_std_a * np.eye(6)
        sig_b = sig_b - noise_std_b * np.eye(6)
        report.add_trigger("NoiseFloorSubtraction")

    eigvals_a, basis_a = sorted_eigenbasis(sig_a[:3, :3])
    eigvals_b, basis_b = sorted_eigenbasis(sig_b[:3, :3])

    degenerate = False
    if min(eigvals_a[0], eigvals_b[0]) <= 0.0:
        degenerate = True
        report.add_trigger("IndefiniteCovariance")
        logger.warning(
            "Rotational covariance block is singular or indefinite (min eigenvalues %.3e, %.3e)",
            eigvals_a[0], eigvals_b[0],
        )
    if _has_repeated_eigenvalues(eigvals_a) or _has_repeated_eigenvalues(eigvals_b):
        degenerate = True
        report.add_trigger("RepeatedEigenvalues")
        logger.warning("Rotational covariance has repeated eigenvalues; eigenbasis is not unique")

    sig_a_rr = sig_a[:3, :3]
    sig_a_rt = sig_a[:3, 3:6]
    sig_b_rt = sig_b[:3, 3:6]
    mean_b_inv = se3_inverse(stats_b.mean)

    # Conjugation by R preserves the spectrum of the rotational block
    abs_eigs = np.abs(eigvals_a)
    max_condition = float(abs_eigs.max() / abs_eigs.min()) if abs_eigs.min() > 0.0 else float("inf")

    hypotheses = []
    for Q in HYPOTHESIS_SIGNS:
        R = basis_a @ Q @ basis_b.T

        conjugated = R.T @ sig_a_rr @ R
        # [R^T t]_× estimate; pinv tolerates singular blocks
        temp = linalg.pinv(conjugated) @ (sig_b_rt - R.T @ sig_a_rt @ R)
        # Project onto so(3): noise breaks exact skew-symmetry
        t = -R @ unskew(0.5 * (temp.T - temp))

        X = make_se3(R, t)
        Y = stats_a.mean @ X @ mean_b_inv
        hypotheses.append(Hypothesis(
            rotation=R,
            translation=t,
            valid=bool(np.linalg.det(R) > 0.0),
            transform=X,
            companion=Y,
        ))

    if max_condition > constants.CONDITION_WARN_THRESHOLD:
        degenerate = True
        report.add_trigger("IllConditionedRotationBlock")
        logger.warning("Conjugated rotational block is ill-conditioned (cond %.3e)", max_condition)

    result = HypothesisSet(
        hypotheses=tuple(hypotheses),
        eigenvalues_a=eigvals_a,
        eigenvalues_b=eigvals_b,
        degenerate=degenerate,
    )
    report.degenerate = degenerate
    report.metrics.update({
        "n_valid": result.n_valid,
        "eigenvalues_a": eigvals_a.tolist(),
        "eigenvalues_b": eigvals_b.tolist(),
        "max_condition": max_condition,
    })
    if result.n_valid == 0:
        logger.warning("No SE(3)-valid hypothesis survived the determinant check")
    else:
        logger.debug("Generated %d valid hypotheses of %d", result.n_valid, len(hypotheses))
    return result, report


def batch_solve_xy(
    A: TransformStackLike,
    B: TransformStackLike,
    hypothesis_config: Optional[HypothesisConfig] = None,
    mean_config: Optional[MeanConfig] = None,
) -> Tuple[BatchSolveResult, List[OpReport]]:
    """
    Correspondence-free A X = Y B: statistics of both streams plus hypotheses.

    Args:
        A: First stream (N_A, 4, 4)
        B: Second stream (N_B, 4, 4); N_B need not equal N_A
        hypothesis_config: Noise-floor settings
        mean_config: Karcher mean settings

    Returns:
        Tuple of (BatchSolveResult, [report_A, report_B, report_hypotheses])
    """
    hypothesis_config = hypothesis_config or HypothesisConfig()
    mean_config = mean_config or MeanConfig()

    stats_a, report_a = compute_mean_and_covariance(
        A, tolerance=mean_config.tolerance, max_iterations=mean_config.max_iterations
    )
    stats_b, report_b = compute_mean_and_covariance(
        B, tolerance=mean_config.tolerance, max_iterations=mean_config.max_iterations
    )
    hypotheses, report_h = generate_hypotheses(
        stats_a,
        stats_b,
        noise_std_a=hypothesis_config.noise_std_a,
        noise_std_b=hypothesis_config.noise_std_b,
        subtract_noise_floor=hypothesis_config.subtract_noise_floor,
    )
    result = BatchSolveResult(stats_a=stats_a, stats_b=stats_b, hypotheses=hypotheses)
    return result, [report_a, report_b, report_h]
