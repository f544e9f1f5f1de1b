"""
Pipeline stages.

    entries       MatrixEntry and entry frames (row, col, value)
    gram          Gram builder: A^T A from sparse entries
    eigen         Dense eigensolver wrapper
    spectrum      Singular value filter
    left_vectors  U reconstructor: A V S^-1
    parallel      Row partitioning and joblib execution
    diagnostics   Dense orthonormality and reconstruction checks
"""

from tssvd.core.eigen import eigendecompose
from tssvd.core.gram import build_gram
from tssvd.core.left_vectors import reconstruct_left
from tssvd.core.spectrum import filter_singular_values

__all__ = [
    'build_gram',
    'eigendecompose',
    'filter_singular_values',
    'reconstruct_left',
]
