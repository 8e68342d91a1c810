"""
Pydantic validation models for solver parameters.

Flat parameter names match the keys of config/axbycz_base.yaml.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from axbycz_calib import constants


class SolverParams(BaseModel):
    """Validated parameters for the AXB = YCZ solvers."""

    model_config = ConfigDict(extra="forbid")

    # Karcher mean iteration
    mean_tolerance: float = Field(default=constants.MEAN_TOLERANCE, gt=0.0)
    mean_max_iterations: int = Field(default=constants.MEAN_MAX_ITERATIONS, ge=1)

    # Noise floor subtracted from both covariances before eigendecomposition
    noise_std_a: float = Field(default=constants.DEFAULT_NOISE_STD, ge=0.0)
    noise_std_b: float = Field(default=constants.DEFAULT_NOISE_STD, ge=0.0)
    subtract_noise_floor: bool = constants.DEFAULT_SUBTRACT_NOISE_FLOOR

    # Cost function
    translation_weight: float = Field(default=constants.TRANSLATION_WEIGHT_PROB1, ge=0.0)
