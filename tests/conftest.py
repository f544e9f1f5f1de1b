"""Shared synthetic matrices for the tssvd tests."""

import numpy as np
import pytest

from tssvd.core.entries import from_dense


def make_tall_sparse(m=200, n=8, density=0.5, seed=42):
    """Random m x n matrix with roughly *density* nonzeros, as (dense, frame)."""
    rng = np.random.default_rng(seed)
    dense = rng.standard_normal((m, n))
    dense[rng.random((m, n)) > density] = 0.0
    return dense, from_dense(dense)


@pytest.fixture
def tall_sparse():
    """200 x 8 random sparse matrix, full column rank."""
    return make_tall_sparse()


@pytest.fixture
def diag_like():
    """The 4 x 2 example: singular values 3 and 4."""
    return [(1, 1, 3.0), (2, 2, 4.0), (3, 1, 0.0), (4, 2, 0.0)]
