"""
TSSVD -- singular value decomposition of tall and skinny sparse matrices.

Public API:
    from tssvd import sparse_svd
    U, S, V = sparse_svd(entries, m, n, min_svalue)

Layers:
    tssvd.core        Stages -- entry frames in, arrays/entry frames out, no file I/O
    tssvd.io          Text triplet I/O (reader, writer)
    tssvd.validation  Preconditions and entry validation
    tssvd.config      Defaults and YAML configuration
    tssvd.run         Command line
"""

from tssvd.core.entries import MatrixEntry, to_entries, to_frame
from tssvd.errors import (
    InvalidShapeError,
    InvalidThresholdError,
    NoSingularValuesAboveThresholdError,
)
from tssvd.svd import SVDResult, sparse_svd

__version__ = '0.1.0'

__all__ = [
    'sparse_svd',
    'SVDResult',
    'MatrixEntry',
    'to_entries',
    'to_frame',
    'InvalidShapeError',
    'InvalidThresholdError',
    'NoSingularValuesAboveThresholdError',
]
