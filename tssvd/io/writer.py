"""
Writer -- all matrix writes go through here.

Output uses the input format (row,col,value, no header), sorted by
(row, col) so reruns produce identical files.
"""

import logging
from pathlib import Path
from typing import Union

import polars as pl

from tssvd.core.entries import ENTRY_COLUMNS

logger = logging.getLogger(__name__)


def write_entries(frame: pl.DataFrame, path: Union[str, Path], verbose: bool = False) -> Path:
    """
    Write an entry frame as row,col,value text.

    Args:
        frame: Entry frame
        path: Output file (parent directories are created)
        verbose: Print path on write

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    frame.select(ENTRY_COLUMNS).sort(['row', 'col']).write_csv(path, include_header=False)

    logger.debug(f"Wrote {frame.height:,} entries to {path}")
    if verbose:
        print(f"  -> {path} ({frame.height} entries)")

    return path
