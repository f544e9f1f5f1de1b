"""
Partitioned execution for entry frames.

Both aggregation stages (Gram builder, U reconstructor) follow the same
shape: split the entries by row into partitions, run a pure function on
every partition with joblib, then merge the partial results with a
group-by-sum. Sums are associative and commutative, so partition count
and completion order never change the result beyond float rounding.
"""

import logging
import os
from typing import Any, Callable, List, Optional, Sequence

import polars as pl

from tssvd.errors import ConfigError

logger = logging.getLogger(__name__)

PARTITION_COLUMN = '_partition'


def resolve_workers(n_jobs: Optional[int] = None) -> int:
    """
    Resolve the worker count.

    TSSVD_WORKERS overrides the argument (0 = auto-detect). -1 means all
    cores, as in joblib.
    """
    env_workers = os.environ.get('TSSVD_WORKERS', '')
    if env_workers:
        try:
            n_jobs = int(env_workers) or -1
        except ValueError:
            raise ConfigError(f"TSSVD_WORKERS must be an integer, got {env_workers!r}") from None

    if n_jobs is None:
        return 1
    if n_jobs == -1:
        return os.cpu_count() or 2
    if n_jobs < 1:
        raise ConfigError(f"n_jobs must be >= 1 or -1, got {n_jobs}")
    return n_jobs


def partition_by_row(frame: pl.DataFrame, n_partitions: int) -> List[pl.DataFrame]:
    """Split *frame* into at most *n_partitions* frames keyed by row mod P.

    All entries of a row land in the same partition.
    """
    if n_partitions < 1:
        raise ValueError(f"n_partitions must be >= 1, got {n_partitions}")

    if frame.height == 0:
        return []
    if n_partitions == 1:
        return [frame]

    return (
        frame
        .with_columns((pl.col('row') % n_partitions).alias(PARTITION_COLUMN))
        .partition_by(PARTITION_COLUMN, include_key=False, maintain_order=True)
    )


def map_partitions(
    func: Callable[..., Any],
    partitions: Sequence[pl.DataFrame],
    n_jobs: int = 1,
    **kwargs,
) -> List[Any]:
    """Apply func(partition, **kwargs) to every partition.

    Uses a joblib thread pool when n_jobs > 1 (polars releases the GIL);
    runs inline otherwise. Keyword arguments are shared read-only.
    """
    if not partitions:
        return []

    if n_jobs <= 1 or len(partitions) == 1:
        return [func(part, **kwargs) for part in partitions]

    from joblib import Parallel, delayed

    effective = min(n_jobs, len(partitions))
    logger.debug(f"Running {len(partitions)} partitions on {effective} workers")

    return Parallel(n_jobs=effective, prefer='threads')(
        delayed(func)(part, **kwargs) for part in partitions
    )


def merge_partials(
    partials: Sequence[pl.DataFrame],
    keys: List[str],
    value: str,
    schema: dict,
) -> pl.DataFrame:
    """Concatenate per-partition partial sums and reduce them by key."""
    partials = [p for p in partials if p.height > 0]
    if not partials:
        return pl.DataFrame(schema=schema)

    return (
        pl.concat(partials, how='vertical')
        .group_by(keys)
        .agg(pl.col(value).sum())
        .select(list(schema))
    )
