"""
Reader -- all matrix reads go through here.

Input format: one entry per line, ``row,col,value``, 1-indexed, no
header. Lines starting with '#' and blank lines are skipped.
"""

import logging
from pathlib import Path
from typing import Union

import polars as pl

from tssvd.core.entries import ENTRY_COLUMNS, ENTRY_SCHEMA, coalesce, empty_frame
from tssvd.errors import EntryValidationError

logger = logging.getLogger(__name__)


def load_entries(
    path: Union[str, Path],
    sum_duplicates: bool = False,
    separator: str = ',',
) -> pl.DataFrame:
    """
    Load a matrix from a delimited text file.

    Args:
        path: Text file with one row,col,value record per line
        sum_duplicates: Merge repeated (row, col) pairs by summing their values
        separator: Field separator

    Returns:
        Entry frame (row: Int64, col: Int64, value: Float64)
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"No matrix file at {path}")

    try:
        frame = pl.read_csv(
            p,
            has_header=False,
            separator=separator,
            schema=ENTRY_SCHEMA,
            comment_prefix='#',
        )
    except pl.exceptions.NoDataError:
        return empty_frame()
    except pl.exceptions.ComputeError as e:
        raise EntryValidationError([f"Failed to parse {p}: {e}"]) from e

    # Blank lines come through as all-null rows
    frame = frame.filter(~pl.all_horizontal(pl.col(ENTRY_COLUMNS).is_null()))

    incomplete = frame.filter(pl.any_horizontal(pl.col(ENTRY_COLUMNS).is_null())).height
    if incomplete > 0:
        raise EntryValidationError([f"{incomplete:,} incomplete records in {p}"])

    if sum_duplicates:
        before = frame.height
        frame = coalesce(frame)
        if frame.height < before:
            logger.info(f"Summed {before - frame.height:,} duplicate entries in {p}")

    logger.debug(f"Loaded {frame.height:,} entries from {p}")
    return frame
