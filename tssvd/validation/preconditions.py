"""
Preconditions checked at entry, before any aggregation runs.
"""

import math

from tssvd.errors import InvalidShapeError, InvalidThresholdError

# Dividing by singular values smaller than this makes U numerically unstable.
MIN_SVALUE_FLOOR = 1.0e-8


def check_shape(m: int, n: int) -> None:
    """Require a tall and skinny shape: m >= n > 0."""
    if m < n or m <= 0 or n <= 0:
        raise InvalidShapeError(m, n)


def check_threshold(min_svalue: float) -> None:
    """Require min_svalue >= MIN_SVALUE_FLOOR (NaN is rejected too)."""
    if math.isnan(min_svalue) or min_svalue < MIN_SVALUE_FLOOR:
        raise InvalidThresholdError(min_svalue, MIN_SVALUE_FLOOR)
