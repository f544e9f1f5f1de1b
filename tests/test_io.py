"""
Tests for the row,col,value reader and writer.
"""

import polars as pl
import pytest

from tssvd.core.entries import to_frame
from tssvd.errors import EntryValidationError
from tssvd.io import load_entries, write_entries
from tssvd.svd import sparse_svd


class TestLoadEntries:
    """Reading triplet files."""

    def test_basic(self, tmp_path):
        """One record per line, 1-indexed."""
        path = tmp_path / 'a.txt'
        path.write_text("1,1,3.0\n2,2,4.0\n3,1,0\n")

        frame = load_entries(path)

        assert frame.rows() == [(1, 1, 3.0), (2, 2, 4.0), (3, 1, 0.0)]
        assert dict(frame.schema) == {'row': pl.Int64, 'col': pl.Int64, 'value': pl.Float64}

    def test_comments_and_blank_lines(self, tmp_path):
        """'#' lines and blank lines are skipped."""
        path = tmp_path / 'a.txt'
        path.write_text("# A, 3 x 2\n1,1,3.0\n\n2,2,-4.5\n")

        frame = load_entries(path)

        assert frame.rows() == [(1, 1, 3.0), (2, 2, -4.5)]

    def test_sum_duplicates(self, tmp_path):
        """Repeated (row, col) pairs are summed on request."""
        path = tmp_path / 'a.txt'
        path.write_text("1,1,1.0\n2,1,5.0\n1,1,2.0\n")

        assert load_entries(path).height == 3

        frame = load_entries(path, sum_duplicates=True).sort(['row', 'col'])
        assert frame.rows() == [(1, 1, 3.0), (2, 1, 5.0)]

    def test_missing_file(self, tmp_path):
        """Missing input raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_entries(tmp_path / 'nope.txt')

    def test_malformed_value(self, tmp_path):
        """Unparsable fields are a validation error."""
        path = tmp_path / 'a.txt'
        path.write_text("1,1,3.0\n2,x,4.0\n")

        with pytest.raises(EntryValidationError):
            load_entries(path)

    def test_incomplete_record(self, tmp_path):
        """Records with missing fields are a validation error."""
        path = tmp_path / 'a.txt'
        path.write_text("1,1,3.0\n2,2\n")

        with pytest.raises(EntryValidationError):
            load_entries(path)

    def test_empty_file(self, tmp_path):
        """An empty file is an empty matrix."""
        path = tmp_path / 'a.txt'
        path.write_text("")

        frame = load_entries(path)
        assert frame.height == 0
        assert frame.columns == ['row', 'col', 'value']


class TestWriteEntries:
    """Writing triplet files."""

    def test_sorted_no_header(self, tmp_path):
        """Output is sorted by (row, col) with no header line."""
        frame = to_frame([(2, 1, 5.0), (1, 2, -1.5), (1, 1, 0.25)])

        path = write_entries(frame, tmp_path / 'out.txt')

        assert path.read_text().splitlines() == ["1,1,0.25", "1,2,-1.5", "2,1,5.0"]

    def test_creates_parent_dirs(self, tmp_path):
        """Parent directories are created."""
        path = write_entries(to_frame([(1, 1, 1.0)]), tmp_path / 'deep' / 'dir' / 'S.txt')
        assert path.exists()

    def test_outputs_reload(self, tmp_path):
        """Written U, S, V load back to the same entries."""
        result = sparse_svd([(1, 1, 3.0), (2, 2, 4.0)], 4, 2, 1.0)

        for name, frame in zip('USV', result):
            path = write_entries(frame, tmp_path / f'{name}.txt')
            reloaded = load_entries(path)
            assert reloaded.height == frame.height
            assert reloaded.sort(['row', 'col']).equals(frame.sort(['row', 'col']))
