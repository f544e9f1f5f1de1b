"""
U Reconstructor -- U = A * (V * S^-1).

W = V * S^-1 is dense n x k and small, so it is shared read-only with
every partition of A. Each partition joins its entries (r, c, v) with
the W entries keyed by the same index c and sums v * w over (r, j).
A is partitioned by row, so every (r, j) output is owned by one
partition; the final group-by-sum merge holds for any partitioning.
"""

import logging
import time
from typing import Sequence

import numpy as np
import polars as pl

from tssvd.core.entries import ENTRY_COLUMNS, ENTRY_SCHEMA, to_frame
from tssvd.core.parallel import map_partitions, merge_partials, partition_by_row
from tssvd.core.spectrum import SingularPair
from tssvd.errors import InvalidThresholdError

logger = logging.getLogger(__name__)

PRODUCT_SCHEMA = {
    'a_row': pl.Int64,
    'w_col': pl.Int64,
    'product': pl.Float64,
}


def scaled_right_vectors(vectors: np.ndarray, retained: Sequence[SingularPair]) -> np.ndarray:
    """W[i, j] = V[i, index_j] / sigma_j for the retained pairs, shape (n, k)."""
    for pair in retained:
        if not pair.sigma > 0.0:
            raise InvalidThresholdError(pair.sigma)

    indices = [pair.index for pair in retained]
    sigmas = np.array([pair.sigma for pair in retained], dtype=np.float64)
    return vectors[:, indices] / sigmas


def weights_frame(weights: np.ndarray) -> pl.DataFrame:
    """W as join-ready rows: key (row of W, 1-indexed), w_col, w_value."""
    n, k = weights.shape
    keys, cols = np.indices((n, k))
    return pl.DataFrame(
        {
            'key': keys.ravel() + 1,
            'w_col': cols.ravel() + 1,
            'w_value': weights.ravel(),
        },
        schema={'key': pl.Int64, 'w_col': pl.Int64, 'w_value': pl.Float64},
    )


def multiply_partition(part: pl.DataFrame, weights: pl.DataFrame) -> pl.DataFrame:
    """Partial products of one partition of A with W, summed by (a_row, w_col)."""
    a_cols = part.select(
        pl.col('row').alias('a_row'),
        pl.col('col').alias('key'),
        pl.col('value').alias('a_value'),
    )
    return (
        a_cols.join(weights, on='key', how='inner')
        .with_columns((pl.col('a_value') * pl.col('w_value')).alias('product'))
        .group_by(['a_row', 'w_col'])
        .agg(pl.col('product').sum())
        .select(list(PRODUCT_SCHEMA))
    )


def reconstruct_left(
    data,
    vectors: np.ndarray,
    retained: Sequence[SingularPair],
    n_partitions: int = 8,
    n_jobs: int = 1,
) -> pl.DataFrame:
    """
    Compute U = A * V * S^-1 as an entry frame.

    Args:
        data: Entries of A, 1-indexed
        vectors: (n, n) eigenvectors of A^T A, as columns
        retained: Retained (index, sigma) pairs, in output column order
        n_partitions: Number of row partitions of A
        n_jobs: Worker count for the join-and-aggregate step

    Returns:
        Entry frame for U (m x k); zero sums are dropped
    """
    frame = to_frame(data)
    t0 = time.perf_counter()

    weights = weights_frame(scaled_right_vectors(vectors, retained))

    partitions = partition_by_row(frame, n_partitions)
    partials = map_partitions(multiply_partition, partitions, n_jobs=n_jobs, weights=weights)
    products = merge_partials(partials, ['a_row', 'w_col'], 'product', PRODUCT_SCHEMA)

    u = (
        products
        .filter(pl.col('product') != 0.0)
        .select(
            pl.col('a_row').alias('row'),
            pl.col('w_col').alias('col'),
            pl.col('product').alias('value'),
        )
        .cast(ENTRY_SCHEMA)
        .select(ENTRY_COLUMNS)
    )

    logger.debug(
        f"U: {u.height:,} entries from {frame.height:,} A entries x {weights.height:,} W entries "
        f"in {time.perf_counter() - t0:.3f}s"
    )
    return u
