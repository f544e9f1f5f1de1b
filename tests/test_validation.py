"""
Tests for entry validation, entry conversion and partitioned execution.
"""

import numpy as np
import polars as pl
import pytest

from tssvd.core.entries import (
    MatrixEntry,
    coalesce,
    from_dense,
    to_dense,
    to_entries,
    to_frame,
)
from tssvd.core.parallel import map_partitions, merge_partials, partition_by_row, resolve_workers
from tssvd.errors import ConfigError, EntryValidationError
from tssvd.validation import check_shape, check_threshold, validate_entries


class TestValidateEntries:
    """Index range, finiteness and duplicate checks."""

    def test_valid(self):
        """In-range entries pass and are counted."""
        report = validate_entries(to_frame([(1, 1, 1.0), (3, 2, 2.0)]), 3, 2)

        assert report.valid
        assert report.n_entries == 2
        assert report.n_rows_present == 2
        assert report.n_cols_present == 2

    def test_out_of_range(self):
        """Rows beyond m and columns below 1 are errors."""
        frame = to_frame([(5, 1, 1.0), (1, 0, 2.0)])

        report = validate_entries(frame, 4, 2, raise_on_error=False)

        assert not report.valid
        assert len(report.errors) == 2

        with pytest.raises(EntryValidationError) as exc:
            validate_entries(frame, 4, 2)
        assert "row outside 1..4" in str(exc.value)

    def test_non_finite(self):
        """inf values are errors."""
        with pytest.raises(EntryValidationError):
            validate_entries(to_frame([(1, 1, float('inf'))]), 2, 2)

    def test_duplicates_warn(self, caplog):
        """Duplicate pairs are a logged warning, not an error."""
        report = validate_entries(to_frame([(1, 1, 1.0), (1, 1, 2.0)]), 2, 2)

        assert report.valid
        assert report.n_duplicates == 1
        assert "duplicate" in caplog.text

    def test_summary(self):
        """Summary reports status."""
        report = validate_entries(to_frame([(1, 1, 1.0)]), 2, 2)
        assert "PASSED" in report.summary()
        assert report.to_dict()['n_entries'] == 1


class TestPreconditions:
    """Shape and threshold checks."""

    def test_square_is_allowed(self):
        check_shape(3, 3)

    def test_threshold_floor(self):
        check_threshold(1e-8)


class TestEntries:
    """Conversions between entries, frames and dense arrays."""

    def test_to_frame_from_mixed(self):
        """MatrixEntry and tuples are both accepted; ints become floats."""
        frame = to_frame([MatrixEntry(1, 2, 3.0), (2, 1, 4)])

        assert frame.rows() == [(1, 2, 3.0), (2, 1, 4.0)]
        assert frame['value'].dtype == pl.Float64

    def test_integral_float_indices(self):
        """Whole-number float indices are accepted."""
        assert to_frame([(2.0, 1.0, 5.0)]).rows() == [(2, 1, 5.0)]

        frame = pl.DataFrame({'row': [3.0], 'col': [1.0], 'value': [1.5]})
        assert to_frame(frame).rows() == [(3, 1, 1.5)]

    @pytest.mark.parametrize("entry", [(1.7, 1, 2.0), (1, 2.5, 2.0)])
    def test_fractional_tuple_index(self, entry):
        """Fractional indices are rejected, not truncated."""
        with pytest.raises(EntryValidationError):
            to_frame([entry])

    @pytest.mark.parametrize("column", ['row', 'col'])
    def test_fractional_frame_index(self, column):
        """Float index columns with fractions are rejected."""
        data = {'row': [1.0, 2.0], 'col': [1.0, 2.0], 'value': [1.0, 2.0]}
        data[column] = [1.0, 1.7]

        with pytest.raises(EntryValidationError) as exc:
            to_frame(pl.DataFrame(data))
        assert f"non-integral {column}" in str(exc.value)

    def test_to_frame_missing_column(self):
        """DataFrames must carry row, col and value."""
        with pytest.raises(ValueError):
            to_frame(pl.DataFrame({'row': [1], 'col': [1]}))

    def test_to_entries_sorted(self):
        entries = to_entries(to_frame([(2, 1, 1.0), (1, 2, 2.0)]))
        assert entries == [MatrixEntry(1, 2, 2.0), MatrixEntry(2, 1, 1.0)]

    def test_dense_round_trip(self):
        """from_dense drops zeros; to_dense restores the array."""
        dense = np.array([[1.0, 0.0], [0.0, -2.0], [3.0, 0.0]])
        frame = from_dense(dense)

        assert frame.height == 3
        np.testing.assert_array_equal(to_dense(frame, (3, 2)), dense)
        assert from_dense(dense, keep_zeros=True).height == 6

    def test_coalesce(self):
        frame = coalesce(to_frame([(1, 1, 1.0), (1, 1, 2.5), (2, 1, 1.0)]))
        assert sorted(frame.rows()) == [(1, 1, 3.5), (2, 1, 1.0)]


class TestParallel:
    """Row partitioning and merging."""

    def test_rows_stay_together(self):
        """Every row lives in exactly one partition."""
        frame = to_frame([(r, c, 1.0) for r in range(1, 21) for c in (1, 2, 3)])

        parts = partition_by_row(frame, 4)

        assert sum(p.height for p in parts) == frame.height
        seen = [set(p['row'].to_list()) for p in parts]
        for i, a in enumerate(seen):
            for b in seen[i + 1:]:
                assert not a & b
        assert all(p.columns == ['row', 'col', 'value'] for p in parts)

    def test_empty_frame(self):
        assert partition_by_row(to_frame([]), 4) == []

    def test_invalid_partition_count(self):
        with pytest.raises(ValueError):
            partition_by_row(to_frame([(1, 1, 1.0)]), 0)

    def test_threads_match_inline(self):
        """joblib execution returns results in partition order."""
        frame = to_frame([(r, 1, float(r)) for r in range(1, 31)])
        parts = partition_by_row(frame, 5)

        def total(part, scale):
            return part['value'].sum() * scale

        assert map_partitions(total, parts, n_jobs=3, scale=2.0) == map_partitions(total, parts, scale=2.0)

    def test_merge_partials(self):
        """Partial sums are reduced by key."""
        schema = {'key': pl.Int64, 'product': pl.Float64}
        a = pl.DataFrame({'key': [1, 2], 'product': [1.0, 2.0]}, schema=schema)
        b = pl.DataFrame({'key': [2], 'product': [5.0]}, schema=schema)

        merged = merge_partials([a, b], ['key'], 'product', schema).sort('key')

        assert merged.rows() == [(1, 1.0), (2, 7.0)]
        assert merge_partials([], ['key'], 'product', schema).height == 0

    def test_resolve_workers(self, monkeypatch):
        """TSSVD_WORKERS overrides the argument."""
        monkeypatch.delenv('TSSVD_WORKERS', raising=False)
        assert resolve_workers(None) == 1
        assert resolve_workers(3) == 3
        assert resolve_workers(-1) >= 1

        with pytest.raises(ConfigError):
            resolve_workers(0)

        monkeypatch.setenv('TSSVD_WORKERS', '2')
        assert resolve_workers(5) == 2

    def test_resolve_workers_bad_env(self, monkeypatch):
        """A non-integer TSSVD_WORKERS is a configuration error."""
        monkeypatch.setenv('TSSVD_WORKERS', 'abc')
        with pytest.raises(ConfigError):
            resolve_workers(2)
