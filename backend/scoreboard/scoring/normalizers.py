"""
Score Normalization Module
==========================
Brings one rater's ratings for one dimension onto a canonical spread.

Raters differ in how much of the scale they use, how strict they are and how
widely they spread their ratings. For each rater and dimension:

1. Linear rescale of the rater's values into [-2/3, 2/3].
2. A sign-preserving power transform sign(x) * |x|^p, with p = -ln(1 - t),
   whose parameter t in [0, 1] is searched so that the mean of squares of the
   transformed values equals 1/3.

A rater who gave the same rating to everything carries no signal for that
dimension and gets all zeros.

Usage:
    from scoreboard.scoring.normalizers import DimensionNormalizer, ScalingError

    normalizer = DimensionNormalizer()
    try:
        normalized = normalizer.normalize([3, 5, 4, 1, 2])
    except ScalingError as e:
        print(f"Rater cannot be scaled: error {e.error}")
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


# Mean of squares every normalized distribution is driven towards
TARGET_MOMENT = 1.0 / 3.0

# Rescaled values lie in [-RESCALE_BOUND, RESCALE_BOUND]
RESCALE_BOUND = 2.0 / 3.0

# Width below which the bracket search stops
SEARCH_EPSILON = 1e-6

# Largest acceptable |mean of squares - target| at the chosen parameter
MAX_ERROR = 1e-3


class ScalingError(Exception):
    """
    Raised when the parameter search cannot reach the target moment.

    The failure is deterministic: the same values always fail the same way.

    Attributes:
        error: Final deviation from the target moment
        owner: Rater whose scores failed, when known
        dimension: Dimension that failed, when known
    """

    def __init__(
        self,
        error: float,
        owner: Optional[str] = None,
        dimension: Optional[str] = None
    ):
        self.error = error
        self.owner = owner
        self.dimension = dimension
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        msg = f"Scaling failed: error {self.error} is too large"
        if self.owner is not None or self.dimension is not None:
            msg += f" (rater={self.owner}, dimension={self.dimension})"
        return msg

    def with_context(self, owner: Optional[str], dimension: Optional[str]) -> "ScalingError":
        """Copy of this error annotated with the rater and dimension."""
        return ScalingError(self.error, owner=owner, dimension=dimension)


@dataclass
class NormalizationResult:
    """Outcome of normalizing one sequence."""
    values: List[float]
    parameter: Optional[float]  # None when the input was degenerate
    error: float
    degenerate: bool = False


# =============================================================================
# BUILDING BLOCKS
# =============================================================================

def rescale(values: np.ndarray) -> np.ndarray:
    """
    Map values linearly so that min -> -2/3 and max -> 2/3.

    The caller must ensure max > min.
    """
    lo = values.min()
    hi = values.max()
    return ((values - lo) / (hi - lo) * 2.0 - 1.0) * RESCALE_BOUND


def power_exponent(t: float) -> float:
    """Exponent p = -ln(1 - t); 0 at t = 0, unbounded as t -> 1."""
    return -math.log(1.0 - t)


def transform(values: np.ndarray, t: float) -> np.ndarray:
    """
    Sign-preserving power transform sign(x) * |x|^p with p = -ln(1 - t).

    Zero stays zero for every p, including p = 0.
    """
    p = power_exponent(t)
    # np.sign(0) == 0 masks the 0**0 == 1 case
    return np.sign(values) * np.abs(values) ** p


def mean_of_squares(values: np.ndarray) -> float:
    """
    Mean of the squared values, accumulated left to right in input order.

    np.sum sums pairwise and can differ in the last bits.
    """
    total = 0.0
    for v in np.asarray(values, dtype=float).tolist():
        total += v * v
    return total / len(values)


def moment_error(values: np.ndarray, t: float) -> float:
    """Absolute deviation of the transformed mean of squares from the target."""
    return abs(mean_of_squares(transform(values, t)) - TARGET_MOMENT)


def search_parameter(values: np.ndarray, epsilon: float = SEARCH_EPSILON) -> float:
    """
    Locate the transform parameter t in [0, 1] with the smallest moment error.

    Three-way bracket narrowing: the bracket [l, r] is split into thirds at
    mid_l and mid_r, and the third beyond the worse of the two interior
    points is discarded. The mean of squares decreases monotonically in t, so
    the error is V-shaped around the crossing point. The bracket shrinks by
    2/3 per step, about 31 steps from width 1 down to 1e-6.

    Returns:
        The last retained interior point.
    """
    l, r = 0.0, 1.0
    res = 0.5
    while r - l > epsilon:
        one_third = (r - l) / 3.0
        mid_l = l + one_third
        mid_r = mid_l + one_third

        if moment_error(values, mid_l) < moment_error(values, mid_r):
            res = mid_l
            r = mid_r
        else:
            res = mid_r
            l = mid_l
    return res


# =============================================================================
# NORMALIZER
# =============================================================================

class DimensionNormalizer:
    """
    Normalizes one rater's values for one dimension.

    Stateless: one instance can serve every rater and dimension, including
    from several threads at once.

    Usage:
        normalizer = DimensionNormalizer()
        normalized = normalizer.normalize(raw_values)

        # With diagnostics
        result = normalizer.normalize_with_details(raw_values)
        result.parameter, result.error
    """

    def __init__(
        self,
        epsilon: float = SEARCH_EPSILON,
        max_error: float = MAX_ERROR
    ):
        """
        Initialize the normalizer.

        Args:
            epsilon: Bracket width at which the parameter search stops
            max_error: Largest accepted deviation from the target moment
        """
        self.epsilon = epsilon
        self.max_error = max_error

    def normalize(self, values: Sequence[float]) -> List[float]:
        """
        Normalize a sequence, preserving order and length.

        Args:
            values: All of one rater's raw values for one dimension

        Returns:
            Normalized values, position for position

        Raises:
            ScalingError: If the final moment error exceeds max_error
        """
        return self.normalize_with_details(values).values

    def normalize_with_details(self, values: Sequence[float]) -> NormalizationResult:
        """Normalize and report the chosen parameter and its moment error."""
        if len(values) == 0:
            return NormalizationResult(values=[], parameter=None, error=0.0, degenerate=True)

        raw = np.asarray(values, dtype=float)

        if raw.min() == raw.max():
            return NormalizationResult(
                values=[0.0] * len(raw),
                parameter=None,
                error=0.0,
                degenerate=True,
            )

        rescaled = rescale(raw)
        t = search_parameter(rescaled, self.epsilon)
        error = moment_error(rescaled, t)

        if error > self.max_error:
            logger.debug(f"Parameter search ended at t={t:.6f} with error {error:.6f}")
            raise ScalingError(error)

        normalized = transform(rescaled, t)
        return NormalizationResult(
            values=[float(v) for v in normalized],
            parameter=t,
            error=error,
        )


def normalize_dimension(values: Sequence[float]) -> List[float]:
    """
    Convenience function to normalize one sequence with default settings.

    Raises:
        ScalingError: If the target moment cannot be reached
    """
    return DimensionNormalizer().normalize(values)
