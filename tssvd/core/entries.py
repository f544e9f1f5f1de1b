"""
Matrix entries -- the sparse (row, col, value) triplet form.

Every matrix that enters or leaves the pipeline (A, U, S, V) is an
unordered collection of 1-indexed entries. In memory that collection is a
polars DataFrame with the ENTRY_SCHEMA columns; MatrixEntry is the
per-element record for callers that want plain Python objects.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

import numpy as np
import polars as pl

from tssvd.errors import EntryValidationError


ENTRY_SCHEMA = {
    'row': pl.Int64,
    'col': pl.Int64,
    'value': pl.Float64,
}

ENTRY_COLUMNS = list(ENTRY_SCHEMA)


@dataclass(frozen=True)
class MatrixEntry:
    """One explicit element of a sparse matrix, 1-indexed."""

    row: int
    col: int
    value: float


EntryLike = Union[MatrixEntry, Tuple[int, int, float]]


def empty_frame() -> pl.DataFrame:
    """Entry frame with the right schema and no rows."""
    return pl.DataFrame(schema=ENTRY_SCHEMA)


def _index(value, name: str) -> int:
    index = int(value)
    if index != value:
        raise EntryValidationError([f"non-integral {name} index {value!r}"])
    return index


def to_frame(data: Union[pl.DataFrame, Iterable[EntryLike]]) -> pl.DataFrame:
    """
    Coerce *data* into an entry frame.

    Accepts an existing DataFrame (must carry row/col/value columns), a
    sequence of MatrixEntry, or a sequence of (row, col, value) tuples.
    Indices must be integral; 2.0 is accepted, 2.5 is not.
    """
    if isinstance(data, pl.DataFrame):
        missing = [c for c in ENTRY_COLUMNS if c not in data.columns]
        if missing:
            raise ValueError(f"Entry frame missing columns: {missing}")
        for name in ('row', 'col'):
            if data[name].dtype.is_float():
                fractional = data.filter(pl.col(name) != pl.col(name).floor()).height
                if fractional > 0:
                    raise EntryValidationError(
                        [f"{fractional:,} entries with a non-integral {name} index"]
                    )
        return data.select(
            [pl.col(name).cast(dtype) for name, dtype in ENTRY_SCHEMA.items()]
        )

    rows = []
    for e in data:
        row, col, value = (e.row, e.col, e.value) if isinstance(e, MatrixEntry) else e
        rows.append((_index(row, 'row'), _index(col, 'col'), float(value)))
    if not rows:
        return empty_frame()
    return pl.DataFrame(rows, schema=ENTRY_SCHEMA, orient='row')


def to_entries(frame: pl.DataFrame) -> List[MatrixEntry]:
    """Materialize an entry frame as a list of MatrixEntry, sorted by (row, col)."""
    return [
        MatrixEntry(row, col, value)
        for row, col, value in frame.sort(['row', 'col']).select(ENTRY_COLUMNS).iter_rows()
    ]


def from_dense(matrix: np.ndarray, keep_zeros: bool = False) -> pl.DataFrame:
    """Entry frame for a dense 2D array (zeros dropped unless keep_zeros)."""
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2D array, got ndim={matrix.ndim}")

    if keep_zeros:
        rows, cols = np.indices(matrix.shape)
        rows, cols = rows.ravel(), cols.ravel()
    else:
        rows, cols = np.nonzero(matrix)

    return pl.DataFrame(
        {
            'row': rows + 1,
            'col': cols + 1,
            'value': matrix[rows, cols],
        },
        schema=ENTRY_SCHEMA,
    )


def to_dense(frame: pl.DataFrame, shape: Tuple[int, int]) -> np.ndarray:
    """
    Dense array for an entry frame. Duplicate (row, col) pairs are summed.

    Only meant for small matrices (diagnostics, tests).
    """
    dense = np.zeros(shape, dtype=np.float64)
    if frame.height == 0:
        return dense
    rows = frame['row'].to_numpy() - 1
    cols = frame['col'].to_numpy() - 1
    np.add.at(dense, (rows, cols), frame['value'].to_numpy())
    return dense


def coalesce(frame: pl.DataFrame) -> pl.DataFrame:
    """Sum duplicate (row, col) pairs into a single entry."""
    return (
        frame
        .group_by(['row', 'col'], maintain_order=True)
        .agg(pl.col('value').sum())
        .select(ENTRY_COLUMNS)
    )
