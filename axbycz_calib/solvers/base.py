"""
Shared result type and input handling for the AXB = YCZ solvers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from axbycz_calib.common.errors import DimensionMismatchError, EmptyCandidateSetError
from axbycz_calib.common.geometry.se3_numpy import (
    TransformStackLike,
    as_transform_stack,
    se3_inverse,
)
from axbycz_calib.common.op_report import OpReport
from axbycz_calib.operators.hypotheses import HypothesisSet
from axbycz_calib.operators.mean_cov import ManifoldStatistics
from axbycz_calib.operators.selection import CostTable


@dataclass(frozen=True)
class CalibrationResult:
    """Selected (X, Y, Z) with the cost table and diagnostics that produced it."""
    X: np.ndarray
    Y: np.ndarray
    Z: np.ndarray
    cost: float
    cost_table: CostTable
    statistics: Dict[str, ManifoldStatistics] = field(default_factory=dict)
    reports: List[OpReport] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        """True if every Karcher mean in the solve met its tolerance."""
        return all(s.converged for s in self.statistics.values())


def free_stream(samples: TransformStackLike, label: str) -> np.ndarray:
    """Validate a free data stream as a non-empty (N, 4, 4) stack."""
    if len(samples) == 0:
        raise DimensionMismatchError(f"{label} is empty")
    try:
        return as_transform_stack(samples)
    except ValueError as exc:
        raise DimensionMismatchError(f"{label}: {exc}") from exc


def fixed_frame(frame: TransformStackLike, partners: Sequence[np.ndarray], label: str) -> np.ndarray:
    """
    Reduce a fixed frame to a single 4x4 transform.

    A sequence marks a per-index corresponded data set: its length must match
    every partner stream. The first element is used.
    """
    stack = free_stream(frame, label)
    if len(stack) > 1:
        lengths = {len(p) for p in partners}
        if lengths != {len(stack)}:
            raise DimensionMismatchError(
                f"{label} has {len(stack)} entries but its data set streams have "
                f"lengths {sorted(lengths)}"
            )
    return stack[0]


def invert_stack(stack: np.ndarray) -> np.ndarray:
    """Invert every transform of an (N, 4, 4) stack."""
    return np.stack([se3_inverse(T) for T in stack], axis=0)


def valid_candidates(hypotheses: HypothesisSet, unknown: str) -> List[np.ndarray]:
    """Valid candidates of a hypothesis set; an empty set aborts the solve."""
    candidates = hypotheses.valid_transforms()
    if not candidates:
        raise EmptyCandidateSetError(unknown, "no hypothesis passed the SE(3) determinant check")
    return candidates
