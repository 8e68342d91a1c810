"""
AXB = YCZ calibration constants and default values.

All magic numbers are centralized here with clear documentation.
"""

# =============================================================================
# Numerical Stability Thresholds
# =============================================================================

# Small-angle branch for SO(3)/SE(3) exp/log: below this, Taylor expansions
# replace the closed forms that divide by theta or sin(theta)
ROTATION_EPSILON = 1e-10

# Distance from pi below which the rotation axis is read from the symmetric
# part of R instead of dividing the skew part by sin(theta)
SINGULARITY_EPSILON = 1e-6

# Tolerance for accepting a 3x3 matrix as skew-symmetric (vee operator input)
SKEW_TOLERANCE = 1e-6

# Tolerance for R @ R.T == I when validating rotation blocks
ORTHONORMALITY_TOLERANCE = 1e-5

# Eigenvalues of a covariance block closer than this (relative to the largest)
# are treated as repeated: the eigenbasis is then not unique
EIGEN_GAP_EPSILON = 1e-9

# Condition number of the conjugated rotational covariance block above which
# the translation solve is reported as ill-conditioned
CONDITION_WARN_THRESHOLD = 1e8

# =============================================================================
# Karcher Mean Iteration
# =============================================================================

# Stop when the norm of the averaged tangent residual drops below this
MEAN_TOLERANCE = 1e-5

# Iteration cap; reaching it is a non-fatal convergence failure
MEAN_MAX_ITERATIONS = 100

# =============================================================================
# Hypothesis Generation
# =============================================================================

# Default noise floor (scaled identity subtracted from each 6x6 covariance)
DEFAULT_NOISE_STD = 1e-4

# Noise-floor subtraction is opt-in; it biases noise-free data
DEFAULT_SUBTRACT_NOISE_FLOOR = False

# =============================================================================
# Cost Function
# =============================================================================

# Weight of the translational error against the rotational error.
# Empirically tuned per solver variant.
TRANSLATION_WEIGHT_PROB1 = 1.5
TRANSLATION_WEIGHT_PROB2 = 1.8
