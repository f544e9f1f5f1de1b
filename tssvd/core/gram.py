"""
Gram Builder -- dense A^T A from the sparse entries of A.

For each row of A, every pair of entries (col_a, val_a), (col_b, val_b)
in that row (col_a == col_b included) contributes val_a * val_b to
G[col_a, col_b]. Only one row's entries and the n x n result need to be
in memory at once, which is what "tall and skinny" buys us.

Partitions are keyed by row, so the pairing never crosses partitions;
the per-partition sums are merged by addition.
"""

import logging
import time

import numpy as np
import polars as pl

from tssvd.core.entries import to_frame
from tssvd.core.parallel import map_partitions, merge_partials, partition_by_row
from tssvd.errors import EntryValidationError
from tssvd.validation import check_shape

logger = logging.getLogger(__name__)

PAIR_SCHEMA = {
    'col_a': pl.Int64,
    'col_b': pl.Int64,
    'product': pl.Float64,
}


def row_pair_products(part: pl.DataFrame) -> pl.DataFrame:
    """Partial Gram sums for one partition: self-join on row, sum by column pair."""
    left = part.select(
        pl.col('row'),
        pl.col('col').alias('col_a'),
        pl.col('value').alias('value_a'),
    )
    right = part.select(
        pl.col('row'),
        pl.col('col').alias('col_b'),
        pl.col('value').alias('value_b'),
    )
    return (
        left.join(right, on='row', how='inner')
        .with_columns((pl.col('value_a') * pl.col('value_b')).alias('product'))
        .group_by(['col_a', 'col_b'])
        .agg(pl.col('product').sum())
        .select(list(PAIR_SCHEMA))
    )


def build_gram(
    data,
    m: int,
    n: int,
    n_partitions: int = 8,
    n_jobs: int = 1,
) -> np.ndarray:
    """
    Build the dense Gram matrix G = A^T A.

    Args:
        data: Entries of A (entry frame or sequence of MatrixEntry/tuples), 1-indexed
        m: Number of rows of A
        n: Number of columns of A
        n_partitions: Number of row partitions
        n_jobs: Worker count for the per-partition pairing

    Returns:
        (n, n) float64 array, symmetric up to summation order
    """
    check_shape(m, n)

    frame = to_frame(data)
    t0 = time.perf_counter()

    partitions = partition_by_row(frame, n_partitions)
    partials = map_partitions(row_pair_products, partitions, n_jobs=n_jobs)
    pairs = merge_partials(partials, ['col_a', 'col_b'], 'product', PAIR_SCHEMA)

    gram = np.zeros((n, n), dtype=np.float64)
    if pairs.height > 0:
        cols_a = pairs['col_a'].to_numpy()
        cols_b = pairs['col_b'].to_numpy()
        if cols_a.min() < 1 or cols_a.max() > n:
            raise EntryValidationError(
                [f"column index outside 1..{n} (found {cols_a.min()}..{cols_a.max()})"]
            )
        np.add.at(gram, (cols_a - 1, cols_b - 1), pairs['product'].to_numpy())

    logger.debug(
        f"Gram matrix {n}x{n} from {frame.height:,} entries "
        f"({len(partitions)} partitions, {pairs.height:,} column pairs) "
        f"in {time.perf_counter() - t0:.3f}s"
    )
    return gram
