"""
Candidate assembly and selection for A X B = Y C Z.

Each data set contributes one loop-closure equation  P X Q = Y S Z  in which
P, Q, S are fixed frames or Karcher means of the free streams. Given
candidate sets for the unknowns:

- derive_remaining_unknown solves every equation for Y and evaluates it at
  every (X, Z) pair
- score_combination sums rotation error + weight * translation error of
  left vs. right side over all equations
- select_best scores the dense Cartesian product and returns the minimizer

Empty candidate sets are structural failures and raise
EmptyCandidateSetError; no default transform is ever substituted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from axbycz_calib import constants
from axbycz_calib.common.errors import EmptyCandidateSetError
from axbycz_calib.common.geometry.se3_numpy import se3_inverse
from axbycz_calib.common.metrics import rotation_error, translation_error
from axbycz_calib.common.op_report import OpReport

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class LoopClosure:
    """One loop-closure equation: pre @ X @ post = Y @ middle @ Z."""
    pre: np.ndarray  # (4, 4) left factor of X
    post: np.ndarray  # (4, 4) right factor of X
    middle: np.ndarray  # (4, 4) factor between Y and Z
    name: str = ""

    def sides(self, X: np.ndarray, Y: np.ndarray, Z: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Left- and right-hand transforms of the equation."""
        return self.pre @ X @ self.post, Y @ self.middle @ Z

    def solve_y(self, X: np.ndarray, Z: np.ndarray) -> np.ndarray:
        """Y = pre @ X @ post @ Z^{-1} @ middle^{-1}."""
        return self.pre @ X @ self.post @ se3_inverse(Z) @ se3_inverse(self.middle)


@dataclass(frozen=True)
class CostTable:
    """Dense cost grid over candidate indices (X, Y, Z) and its minimizer."""
    candidates_x: Tuple[np.ndarray, ...]
    candidates_y: Tuple[np.ndarray, ...]
    candidates_z: Tuple[np.ndarray, ...]
    costs: np.ndarray  # (|X|, |Y|, |Z|)
    best_index: Tuple[int, int, int]

    @property
    def best_cost(self) -> float:
        return float(self.costs[self.best_index])

    @property
    def best(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        i, j, k = self.best_index
        return self.candidates_x[i], self.candidates_y[j], self.candidates_z[k]


def _require_candidates(candidates: Sequence[np.ndarray], unknown: str) -> None:
    if len(candidates) == 0:
        raise EmptyCandidateSetError(unknown)


# =============================================================================
# Operators
# =============================================================================


def derive_remaining_unknown(
    equations: Sequence[LoopClosure],
    candidates_x: Sequence[np.ndarray],
    candidates_z: Sequence[np.ndarray],
) -> List[np.ndarray]:
    """
    Y candidates from the mean equations, one per (equation, X, Z).

    Ordering is equation-major, then X, then Z, so the candidate for
    (e, i, k) sits at index e * |X| * |Z| + i * |Z| + k.

    Raises:
        EmptyCandidateSetError: If either input set (or the equation list) is empty
    """
    _require_candidates(candidates_x, "X")
    _require_candidates(candidates_z, "Z")
    if len(equations) == 0:
        raise EmptyCandidateSetError("Y", "no mean equation to derive it from")

    candidates_y = [
        eq.solve_y(X, Z)
        for eq in equations
        for X in candidates_x
        for Z in candidates_z
    ]
    logger.debug(
        "Derived %d Y candidates from %d equations x %d X x %d Z",
        len(candidates_y), len(equations), len(candidates_x), len(candidates_z),
    )
    return candidates_y


def score_combination(
    X: np.ndarray,
    Y: np.ndarray,
    Z: np.ndarray,
    equations: Sequence[LoopClosure],
    translation_weight: float = constants.TRANSLATION_WEIGHT_PROB1,
) -> float:
    """
    Geometric residual of one (X, Y, Z) triple over all loop-closure equations.

    Returns:
        Sum over equations of rotation_error + translation_weight * translation_error
    """
    cost = 0.0
    for eq in equations:
        left, right = eq.sides(X, Y, Z)
        cost += rotation_error(left, right) + translation_weight * translation_error(left, right)
    return cost


def select_best(
    candidates_x: Sequence[np.ndarray],
    candidates_y: Sequence[np.ndarray],
    candidates_z: Sequence[np.ndarray],
    equations: Sequence[LoopClosure],
    translation_weight: float = constants.TRANSLATION_WEIGHT_PROB1,
) -> Tuple[CostTable, OpReport]:
    """
    Exhaustively score the Cartesian product and return the minimizer.

    Iteration order is X, then Y, then Z; ties resolve to the first index
    triple in that order.

    Returns:
        Tuple of (CostTable, OpReport)

    Raises:
        EmptyCandidateSetError: If any candidate set is empty
    """
    _require_candidates(candidates_x, "X")
    _require_candidates(candidates_y, "Y")
    _require_candidates(candidates_z, "Z")

    costs = np.empty((len(candidates_x), len(candidates_y), len(candidates_z)), dtype=float)
    for i, X in enumerate(candidates_x):
        for j, Y in enumerate(candidates_y):
            for k, Z in enumerate(candidates_z):
                costs[i, j, k] = score_combination(X, Y, Z, equations, translation_weight)

    # argmin returns the first occurrence in C order
    flat_index = int(np.argmin(costs))
    best_index = tuple(int(v) for v in np.unravel_index(flat_index, costs.shape))

    table = CostTable(
        candidates_x=tuple(candidates_x),
        candidates_y=tuple(candidates_y),
        candidates_z=tuple(candidates_z),
        costs=costs,
        best_index=best_index,
    )
    report = OpReport(
        name="ExhaustiveSelection",
        exact=True,
        closed_form=True,
        metrics={
            "table_shape": list(costs.shape),
            "best_index": list(best_index),
            "best_cost": table.best_cost,
            "translation_weight": translation_weight,
            "n_equations": len(equations),
        },
    )
    logger.info(
        "Selected candidate %s of %s with cost %.6g", best_index, costs.shape, table.best_cost
    )
    return table, report
