"""
AXB = YCZ from three data sets.

Prerequisites on the input:
    Data set 1: A1 is constant with B1 and C1 free
    Data set 2: C2 is constant with A2 and B2 free
    Data set 3: B3 is constant with A3 and C3 free

X, Y and Z each come from their own hypothesis set, and the triple
minimizing the three-equation cost over the dense |X| x |Y| x |Z| table is
returned.

Note: a fixed B is not practical with a camera rigidly observing a
calibration board, since A and C cannot then be varied independently.
"""

from __future__ import annotations

import logging
from typing import Optional

from axbycz_calib.common.geometry.se3_numpy import TransformStackLike, se3_inverse
from axbycz_calib.config import SolverConfig
from axbycz_calib.operators.hypotheses import batch_solve_xy
from axbycz_calib.operators.selection import LoopClosure, select_best
from axbycz_calib.solvers.base import (
    CalibrationResult,
    fixed_frame,
    free_stream,
    invert_stack,
    valid_candidates,
)

logger = logging.getLogger(__name__)


def axbycz_prob2(
    A1: TransformStackLike,
    B1: TransformStackLike,
    C1: TransformStackLike,
    A2: TransformStackLike,
    B2: TransformStackLike,
    C2: TransformStackLike,
    A3: TransformStackLike,
    B3: TransformStackLike,
    C3: TransformStackLike,
    config: Optional[SolverConfig] = None,
) -> CalibrationResult:
    """
    Solve A X B = Y C Z from A-fixed, C-fixed and B-fixed data sets.

    Args:
        A1: Fixed frame of data set 1; B1, C1 free
        C2: Fixed frame of data set 2; A2, B2 free
        B3: Fixed frame of data set 3; A3, C3 free
        config: Solver configuration (defaults: SolverConfig.prob2_defaults())

    Returns:
        CalibrationResult with the minimum-cost (X, Y, Z)

    Raises:
        DimensionMismatchError: On empty or mis-shaped inputs
        EmptyCandidateSetError: If no valid candidate survives for X, Y or Z
    """
    config = config or SolverConfig.prob2_defaults()

    B1 = free_stream(B1, "B1")
    C1 = free_stream(C1, "C1")
    A2 = free_stream(A2, "A2")
    B2 = free_stream(B2, "B2")
    A3 = free_stream(A3, "A3")
    C3 = free_stream(C3, "C3")
    A1_fixed = fixed_frame(A1, [B1, C1], "A1")
    C2_fixed = fixed_frame(C2, [A2, B2], "C2")
    B3_fixed = fixed_frame(B3, [A3, C3], "B3")

    # Z: C1 Z = (Y^-1 A1 X) B1
    z_solve, z_reports = batch_solve_xy(C1, B1, config.hypothesis, config.mean)
    candidates_z = valid_candidates(z_solve.hypotheses, "Z")

    # X: A2 X = (Y C2 Z) B2^-1
    x_solve, x_reports = batch_solve_xy(A2, invert_stack(B2), config.hypothesis, config.mean)
    candidates_x = valid_candidates(x_solve.hypotheses, "X")

    # Y^-1: C3^-1 Y^-1 = (Z B3^-1 X^-1) A3^-1
    y_solve, y_reports = batch_solve_xy(invert_stack(C3), invert_stack(A3), config.hypothesis, config.mean)
    candidates_y = [se3_inverse(Y_inv) for Y_inv in valid_candidates(y_solve.hypotheses, "Y")]
    logger.info(
        "Prob2: %d X candidates, %d Y candidates, %d Z candidates",
        len(candidates_x), len(candidates_y), len(candidates_z),
    )

    mean_c1 = z_solve.stats_a.mean
    mean_b1 = z_solve.stats_b.mean
    mean_a2 = x_solve.stats_a.mean
    mean_b2 = se3_inverse(x_solve.stats_b.mean)
    mean_c3 = se3_inverse(y_solve.stats_a.mean)
    mean_a3 = se3_inverse(y_solve.stats_b.mean)

    equations = [
        LoopClosure(pre=A1_fixed, post=mean_b1, middle=mean_c1, name="A1 X mean(B1) = Y mean(C1) Z"),
        LoopClosure(pre=mean_a2, post=mean_b2, middle=C2_fixed, name="mean(A2) X mean(B2) = Y C2 Z"),
        LoopClosure(pre=mean_a3, post=B3_fixed, middle=mean_c3, name="mean(A3) X B3 = Y mean(C3) Z"),
    ]

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
            "C3_inv": y_solve.stats_a,
            "A3_inv": y_solve.stats_b,
        },
        reports=[*z_reports, *x_reports, *y_reports, selection_report],
    )
