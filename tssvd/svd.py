"""
Singular Value Decomposition for tall and skinny matrices.

Given an m x n matrix A (m >= n) as sparse 1-indexed entries, compute
U, S, V such that A = U * S * V^T:

    1. G = A^T A                          (Gram builder, partitioned)
    2. G = V diag(lambda) V^T             (dense eigensolver, local)
    3. sigma = sqrt(lambda) >= min_svalue (singular value filter, rank k)
    4. U = A V S^-1                       (join-and-aggregate, partitioned)

There is no restriction on m, but n^2 doubles must fit in memory.
Only singular vectors whose singular value is >= min_svalue are
returned. With k such values:

    S is k x k and diagonal
    U is m x k and satisfies U^T U = I_k
    V is n x k and satisfies V^T V = I_k

Columns follow the eigensolver's order, which is not necessarily
descending, and each column's sign is arbitrary.
"""

import logging
import time
from typing import NamedTuple, Optional

import numpy as np
import polars as pl

from tssvd.config import DEFAULTS
from tssvd.core.eigen import eigendecompose
from tssvd.core.entries import ENTRY_SCHEMA, to_frame
from tssvd.core.gram import build_gram
from tssvd.core.left_vectors import reconstruct_left
from tssvd.core.parallel import resolve_workers
from tssvd.core.spectrum import filter_singular_values
from tssvd.validation import check_shape, check_threshold, validate_entries

logger = logging.getLogger(__name__)


class SVDResult(NamedTuple):
    """U, S, V as entry frames. Unpacks as ``U, S, V = sparse_svd(...)``."""

    U: pl.DataFrame
    S: pl.DataFrame
    V: pl.DataFrame

    @property
    def rank(self) -> int:
        """Number of retained singular values (k)."""
        return self.S.height

    @property
    def singular_values(self) -> np.ndarray:
        """Retained singular values in column order."""
        return self.S.sort('row')['value'].to_numpy()


def sparse_svd(
    data,
    m: int,
    n: int,
    min_svalue: float,
    *,
    method: Optional[str] = None,
    n_partitions: Optional[int] = None,
    n_jobs: Optional[int] = None,
) -> SVDResult:
    """
    Tall and skinny sparse SVD.

    Args:
        data: Entries of A, 1-indexed: an entry frame (row, col, value) or a
            sequence of MatrixEntry / (row, col, value) tuples
        m: Number of rows
        n: Number of columns
        min_svalue: Recover singular values greater or equal to min_svalue
        method: Eigensolver ('eigh', 'scipy', 'svd')
        n_partitions: Row partitions for the aggregation stages
        n_jobs: Workers for the aggregation stages (-1 = all cores)

    Returns:
        SVDResult(U, S, V) of entry frames

    Raises:
        InvalidShapeError: m < n, or a non-positive dimension
        InvalidThresholdError: min_svalue < 1e-8
        EntryValidationError: indices out of range or non-finite values
        NoSingularValuesAboveThresholdError: every singular value < min_svalue
    """
    check_shape(m, n)
    check_threshold(min_svalue)

    method = method or DEFAULTS['eigensolver']
    n_partitions = n_partitions if n_partitions is not None else DEFAULTS['n_partitions']
    workers = resolve_workers(n_jobs if n_jobs is not None else DEFAULTS['n_jobs'])

    frame = to_frame(data)
    validate_entries(frame, m, n)

    t0 = time.perf_counter()
    gram = build_gram(frame, m, n, n_partitions=n_partitions, n_jobs=workers)
    t_gram = time.perf_counter()

    vectors, eigenvalues = eigendecompose(gram, method=method)
    del gram
    t_eigen = time.perf_counter()

    retained = filter_singular_values(eigenvalues, min_svalue)
    k = len(retained)

    indices = [pair.index for pair in retained]
    v = _dense_entries(vectors[:, indices])
    s = pl.DataFrame(
        {
            'row': np.arange(1, k + 1),
            'col': np.arange(1, k + 1),
            'value': [pair.sigma for pair in retained],
        },
        schema=ENTRY_SCHEMA,
    )

    u = reconstruct_left(frame, vectors, retained, n_partitions=n_partitions, n_jobs=workers)
    t_u = time.perf_counter()

    logger.debug(
        f"Stage timings: gram {t_gram - t0:.3f}s, eigen {t_eigen - t_gram:.3f}s, "
        f"U {t_u - t_eigen:.3f}s"
    )
    logger.info(f"Computed {k} singular values and vectors (m={m}, n={n}, min_svalue={min_svalue})")

    return SVDResult(U=u, S=s, V=v)


def _dense_entries(matrix: np.ndarray) -> pl.DataFrame:
    """Every element of a dense matrix as an entry, zeros included."""
    rows, cols = np.indices(matrix.shape)
    return pl.DataFrame(
        {
            'row': rows.ravel() + 1,
            'col': cols.ravel() + 1,
            'value': matrix.ravel(),
        },
        schema=ENTRY_SCHEMA,
    )
