"""
Operators for AXB = YCZ calibration.

Each operator returns its result together with an OpReport.

Modules:
- mean_cov: Karcher mean and tangent covariance of SE(3) samples
- hypotheses: eigenbasis-alignment candidates for A X = Y B
- selection: loop-closure scoring and exhaustive candidate selection
"""

from axbycz_calib.operators.mean_cov import (
    ManifoldStatistics,
    compute_mean_and_covariance,
)
from axbycz_calib.operators.hypotheses import (
    HYPOTHESIS_SIGNS,
    SIGN_MATRICES,
    BatchSolveResult,
    Hypothesis,
    HypothesisSet,
    batch_solve_xy,
    generate_hypotheses,
)
from axbycz_calib.operators.selection import (
    CostTable,
    LoopClosure,
    derive_remaining_unknown,
    score_combination,
    select_best,
)

__all__ = [
    "ManifoldStatistics",
    "compute_mean_and_covariance",
    "HYPOTHESIS_SIGNS",
    "SIGN_MATRICES",
    "BatchSolveResult",
    "Hypothesis",
    "HypothesisSet",
    "batch_solve_xy",
    "generate_hypotheses",
    "CostTable",
    "LoopClosure",
    "derive_remaining_unknown",
    "score_combination",
    "select_best",
]
