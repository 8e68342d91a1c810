"""
AXB = YCZ from two data sets.

Prerequisites on the input:
    Data set 1: A1 is constant with B1 and C1 free
    Data set 2: C2 is constant with A2 and B2 free

In the case of two robotic arms:
    A - robot 1's base to end effector transformation (forward kinematics)
    B - camera to calibration target transformation
    C - robot 2's base to end effector transformation (forward kinematics)
    X - end effector of robot 1 to camera transformation
    Y - robot 1's base to robot 2's base transformation
    Z - end effector of robot 2 to calibration target transformation

Z and X are recovered from hypotheses; Y is derived from both mean
equations at every (X, Z) pair, and the triple minimizing the two-equation
cost is returned.
"""

from __future__ import annotations

import logging
from typing import Optional

from axbycz_calib.common.geometry.se3_numpy import TransformStackLike, se3_inverse
from axbycz_calib.config import SolverConfig
from axbycz_calib.operators.hypotheses import batch_solve_xy
from axbycz_calib.operators.selection import LoopClosure, derive_remaining_unknown, select_best
from axbycz_calib.solvers.base import (
    CalibrationResult,
    fixed_frame,
    free_stream,
    invert_stack,
    valid_candidates,
)

logger = logging.getLogger(__name__)


def axbycz_prob1(
    A1: TransformStackLike,
    B1: TransformStackLike,
    C1: TransformStackLike,
    A2: TransformStackLike,
    B2: TransformStackLike,
    C2: TransformStackLike,
    config: Optional[SolverConfig] = None,
) -> CalibrationResult:
    """
    Solve A X B = Y C Z from an A-fixed and a C-fixed data set.

    Args:
        A1: Fixed frame of data set 1 (4x4, or a sequence whose first entry is used)
        B1, C1: Free streams of data set 1
        A2, B2: Free streams of data set 2
        C2: Fixed frame of data set 2
        config: Solver configuration (defaults: SolverConfig.prob1_defaults())

    Returns:
        CalibrationResult with the minimum-cost (X, Y, Z)

    Raises:
        DimensionMismatchError: On empty or mis-shaped inputs
        EmptyCandidateSetError: If no valid candidate survives for X or Z
    """
    config = config or SolverConfig.prob1_defaults()

    B1 = free_stream(B1, "B1")
    C1 = free_stream(C1, "C1")
    A2 = free_stream(A2, "A2")
    B2 = free_stream(B2, "B2")
    A1_fixed = fixed_frame(A1, [B1, C1], "A1")
    C2_fixed = fixed_frame(C2, [A2, B2], "C2")

    # Z: C1 Z = (Y^-1 A1 X) B1
    z_solve, z_reports = batch_solve_xy(C1, B1, config.hypothesis, config.mean)
    candidates_z = valid_candidates(z_solve.hypotheses, "Z")

    # X: A2 X = (Y C2 Z) B2^-1
    x_solve, x_reports = batch_solve_xy(A2, invert_stack(B2), config.hypothesis, config.mean)
    candidates_x = valid_candidates(x_solve.hypotheses, "X")
    logger.info("Prob1: %d X candidates, %d Z candidates", len(candidates_x), len(candidates_z))

    mean_c1 = z_solve.stats_a.mean
    mean_b1 = z_solve.stats_b.mean
    mean_a2 = x_solve.stats_a.mean
    # Karcher mean of the inverses is the inverse of the Karcher mean
    mean_b2 = se3_inverse(x_solve.stats_b.mean)

    equations = [
        LoopClosure(pre=A1_fixed, post=mean_b1, middle=mean_c1, name="A1 X mean(B1) = Y mean(C1) Z"),
        LoopClosure(pre=mean_a2, post=mean_b2, middle=C2_fixed, name="mean(A2) X mean(B2) = Y C2 Z"),
    ]

    # Y from both mean equations at every (X, Z) pair
    candidates_y = derive_remaining_unknown(equations, candidates_x, candidates_z)

    table, selection_report = select_best(
        candidates_x,
        candidates_y,
        candidates_z,
        equations,
        translation_weight=config.cost.translation_weight,
    )
    X, Y, Z = table.best

    return CalibrationResult(
        X=X,
        Y=Y,
        Z=Z,
        cost=table.best_cost,
        cost_table=table,
        statistics={
            "C1": z_solve.stats_a,
            "B1": z_solve.stats_b,
            "A2": x_solve.stats_a,
            "B2_inv": x_solve.stats_b,
        },
        reports=[*z_reports, *x_reports, selection_report],
    )
