"""
Singular value filter.

sigma_i = sqrt(max(lambda_i, 0)) for every eigenvalue of A^T A, keeping
those with sigma_i >= min_svalue in the order the eigensolver produced
them. The retained pairs keep the eigen-index so V columns and sigmas
stay in lock-step.
"""

import logging
from typing import NamedTuple, Tuple

import numpy as np

from tssvd.errors import NoSingularValuesAboveThresholdError
from tssvd.validation import check_threshold

logger = logging.getLogger(__name__)


class SingularPair(NamedTuple):
    """Eigen-index of a retained singular value and the value itself."""

    index: int
    sigma: float


def singular_values(eigenvalues: np.ndarray) -> np.ndarray:
    """Square roots of the eigenvalues; negative rounding noise clamps to zero."""
    eigenvalues = np.asarray(eigenvalues, dtype=np.float64)
    return np.sqrt(np.maximum(eigenvalues, 0.0))


def filter_singular_values(eigenvalues: np.ndarray, min_svalue: float) -> Tuple[SingularPair, ...]:
    """
    Retain singular values >= min_svalue, preserving eigen-index order.

    Raises:
        InvalidThresholdError: min_svalue below the numerical floor
        NoSingularValuesAboveThresholdError: nothing survives the filter
    """
    check_threshold(min_svalue)

    sigma = singular_values(eigenvalues)
    retained = tuple(
        SingularPair(index=int(i), sigma=float(s))
        for i, s in enumerate(sigma)
        if s >= min_svalue
    )

    if not retained:
        raise NoSingularValuesAboveThresholdError(min_svalue)

    logger.debug(f"Retained {len(retained)} of {len(sigma)} singular values >= {min_svalue}")
    return retained
