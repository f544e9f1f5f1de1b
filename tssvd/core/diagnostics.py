"""
Diagnostics for a computed decomposition.

Dense checks; only practical when m x n fits in memory (tests, small
inputs, the CLI --check flag).
"""

import numpy as np
import polars as pl

from tssvd.core.entries import to_dense, to_frame


def orthonormality_error(frame: pl.DataFrame, n_rows: int, k: int) -> float:
    """max |X^T X - I_k| for the n_rows x k matrix held in *frame*."""
    x = to_dense(frame, (n_rows, k))
    return float(np.max(np.abs(x.T @ x - np.eye(k)))) if k else 0.0


def reconstruct_dense(result, m: int, n: int) -> np.ndarray:
    """A' = U S V^T as a dense (m, n) array."""
    k = result.S.height
    u = to_dense(result.U, (m, k))
    s = to_dense(result.S, (k, k))
    v = to_dense(result.V, (n, k))
    return u @ s @ v.T


def reconstruction_error(data, result, m: int, n: int) -> float:
    """max |A - U S V^T| over all elements."""
    a = to_dense(to_frame(data), (m, n))
    return float(np.max(np.abs(a - reconstruct_dense(result, m, n))))


def check_decomposition(data, result, m: int, n: int) -> dict:
    """All diagnostics in one dict."""
    k = result.S.height
    return {
        'rank': k,
        'u_orthonormality': orthonormality_error(result.U, m, k),
        'v_orthonormality': orthonormality_error(result.V, n, k),
        'reconstruction': reconstruction_error(data, result, m, n),
    }
