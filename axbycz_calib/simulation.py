"""
Synthetic data for AXB = YCZ calibration experiments.

All randomness flows through an explicit numpy.random.Generator so that
every data set is reproducible from its seed.

Usage:
    rng = np.random.default_rng(7)
    X, Y, Z = random_se3(rng), random_se3(rng), random_se3(rng)
    A1, B1, C1 = generate_abc(50, 1, np.zeros(6), 0.1 * np.eye(6), X, Y, Z, rng)
    B1 = sensor_noise(B1, 0.01, rng)
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from axbycz_calib.common.geometry.se3_numpy import (
    TransformStackLike,
    as_transform_stack,
    se3_exp,
    se3_inverse,
)

logger = logging.getLogger(__name__)

# opt_fix values accepted by generate_abc
FIX_A = 1
FIX_B = 2
FIX_C = 3
FULL_CORRESPONDENCE = 4


def random_se3(rng: np.random.Generator) -> np.ndarray:
    """Exponential of a random unit-norm twist."""
    xi = rng.uniform(-1.0, 1.0, size=6)
    xi = xi / np.linalg.norm(xi)
    return se3_exp(xi)


def _perturbation(mean: np.ndarray, cov: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    return se3_exp(rng.multivariate_normal(mean, cov))


def generate_abc(
    length: int,
    opt_fix: int,
    mean: np.ndarray,
    cov: np.ndarray,
    X: np.ndarray,
    Y: np.ndarray,
    Z: np.ndarray,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Generate noise-free streams satisfying A_i X B_i = Y C_i Z.

    Free streams are Gaussian perturbations exp(ξ) of a random initial frame,
    applied on the left, with ξ ~ N(mean, cov) in se(3). Fixed frames are
    repeated over the full length.

    Args:
        length: Number of generated triples
        opt_fix: 1 = A fixed, 2 = B fixed, 3 = C fixed,
                 4 = A and C free with per-index correspondence
        mean: (6,) perturbation mean
        cov: (6, 6) perturbation covariance
        X, Y, Z: Ground truth transforms
        rng: Random generator

    Returns:
        Tuple of (A, B, C), each (length, 4, 4)

    Raises:
        ValueError: If opt_fix is not one of 1..4
    """
    if opt_fix not in (FIX_A, FIX_B, FIX_C, FULL_CORRESPONDENCE):
        raise ValueError(f"opt_fix must be 1, 2, 3 or 4, got {opt_fix}")

    mean = np.asarray(mean, dtype=float).reshape(6)
    cov = np.asarray(cov, dtype=float).reshape(6, 6)
    A_init = random_se3(rng)
    B_init = random_se3(rng)
    C_init = random_se3(rng)
    X_inv = se3_inverse(X)
    Y_inv = se3_inverse(Y)
    Z_inv = se3_inverse(Z)

    A = np.empty((length, 4, 4), dtype=float)
    B = np.empty((length, 4, 4), dtype=float)
    C = np.empty((length, 4, 4), dtype=float)
    for m in range(length):
        if opt_fix == FIX_A:
            A[m] = A_init
            B[m] = _perturbation(mean, cov, rng) @ B_init
            C[m] = Y_inv @ A[m] @ X @ B[m] @ Z_inv
        elif opt_fix == FIX_B:
            A[m] = _perturbation(mean, cov, rng) @ A_init
            B[m] = B_init
            C[m] = Y_inv @ A[m] @ X @ B[m] @ Z_inv
        elif opt_fix == FIX_C:
            B_inv = _perturbation(mean, cov, rng) @ B_init
            B[m] = se3_inverse(B_inv)
            C[m] = C_init
            A[m] = Y @ C[m] @ Z @ B_inv @ X_inv
        else:
            A[m] = _perturbation(mean, cov, rng) @ A_init
            C[m] = _perturbation(mean, cov, rng) @ C_init
            B[m] = X_inv @ se3_inverse(A[m]) @ Y @ C[m] @ Z

    logger.debug("Generated %d triples with opt_fix=%d", length, opt_fix)
    return A, B, C


def sensor_noise(
    g: TransformStackLike,
    std: float,
    rng: np.random.Generator,
    gmean: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Independent Gaussian sensor noise on a stack of transforms.

    Each transform receives its own draw: a rotation perturbation followed by
    a translation perturbation, both applied on the right.

    Args:
        g: (N, 4, 4) transforms (a single 4x4 is treated as N = 1)
        std: Noise standard deviation for both rotation and translation
        rng: Random generator
        gmean: Optional (6,) mean added to both perturbation twists

    Returns:
        (N, 4, 4) noisy transforms
    """
    stack = as_transform_stack(g)
    gmean = np.zeros(6, dtype=float) if gmean is None else np.asarray(gmean, dtype=float).reshape(6)

    noisy = np.empty_like(stack)
    for i, T in enumerate(stack):
        rot = np.concatenate([std * rng.standard_normal(3), np.zeros(3)]) + gmean
        trans = np.concatenate([np.zeros(3), std * rng.standard_normal(3)]) + gmean
        noisy[i] = T @ se3_exp(rot) @ se3_exp(trans)
    return noisy


def scramble_data(M: TransformStackLike, s_rate: float, rng: np.random.Generator) -> np.ndarray:
    """
    Partially permute a stack of transforms.

    Each index is swapped with a uniformly drawn index with probability
    s_rate / 100, destroying the correspondence between streams.
    """
    stack = as_transform_stack(M)
    n = len(stack)
    index = np.arange(n)
    for i in range(n):
        if rng.uniform() <= 0.01 * s_rate:
            j = int(rng.integers(n))
            index[i], index[j] = index[j], index[i]
    return stack[index]
