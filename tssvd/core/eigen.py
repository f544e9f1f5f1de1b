"""
Dense eigensolver -- eigenpairs of the (small) Gram matrix.

Thin wrapper over LAPACK via numpy/scipy. No ordering or sign convention
is promised to callers: eigh returns ascending eigenvalues, svd returns
descending ones, and downstream stages must work with either.
"""

import logging
from typing import NamedTuple

import numpy as np

from tssvd.errors import ConfigError, EigensolverError

logger = logging.getLogger(__name__)

EIGENSOLVERS = ('eigh', 'scipy', 'svd')


class Eigenpairs(NamedTuple):
    """Eigenvectors (as columns) and eigenvalues matched by index."""

    vectors: np.ndarray
    values: np.ndarray


def eigendecompose(gram: np.ndarray, method: str = 'eigh') -> Eigenpairs:
    """
    Eigendecompose a symmetric matrix.

    Args:
        gram: (n, n) symmetric array
        method:
            - eigh:  numpy.linalg.eigh
            - scipy: scipy.linalg.eigh
            - svd:   numpy.linalg.svd; for a PSD matrix the singular values
                     are the eigenvalues and U holds the eigenvectors.
                     values are |lambda| here, so a slightly negative
                     eigenvalue from rounding comes back positive
                     instead of being clamped to zero downstream

    Returns:
        Eigenpairs(vectors (n, n), values (n,))
    """
    gram = np.asarray(gram, dtype=np.float64)
    if gram.ndim != 2 or gram.shape[0] != gram.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {gram.shape}")

    if method not in EIGENSOLVERS:
        raise ConfigError(f"Unknown eigensolver {method!r}, expected one of {EIGENSOLVERS}")

    try:
        if method == 'eigh':
            values, vectors = np.linalg.eigh(gram)
        elif method == 'scipy':
            from scipy.linalg import eigh
            values, vectors = eigh(gram)
        else:
            vectors, values, _ = np.linalg.svd(gram)
    except np.linalg.LinAlgError as e:
        raise EigensolverError(f"Eigendecomposition failed ({method}): {e}") from e

    logger.debug(f"Eigendecomposition ({method}) of {gram.shape[0]}x{gram.shape[0]} matrix")
    return Eigenpairs(vectors=vectors, values=values)
