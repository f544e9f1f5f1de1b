"""
Entry Validation

Checks an entry frame against the declared matrix shape before it is
aggregated: indices in range, no nulls, finite values. Duplicate
(row, col) pairs are reported as warnings; callers that need them merged
use tssvd.core.entries.coalesce().

Usage:
    from tssvd.validation import validate_entries

    report = validate_entries(frame, m=1000, n=10)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import polars as pl

from tssvd.errors import EntryValidationError

logger = logging.getLogger(__name__)


@dataclass
class EntryValidationReport:
    """Report from entry validation."""

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    n_entries: int = 0
    n_rows_present: int = 0
    n_cols_present: int = 0
    n_duplicates: int = 0

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Entries: {self.n_entries:,}",
            f"  Rows present: {self.n_rows_present:,}",
            f"  Columns present: {self.n_cols_present:,}",
            f"  Duplicate (row, col) pairs: {self.n_duplicates:,}",
        ]
        for e in self.errors:
            lines.append(f"  ERROR: {e}")
        for w in self.warnings:
            lines.append(f"  WARNING: {w}")
        lines.append(f"Status: {'PASSED' if self.valid else 'FAILED'}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict."""
        return {
            'valid': self.valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'n_entries': self.n_entries,
            'n_rows_present': self.n_rows_present,
            'n_cols_present': self.n_cols_present,
            'n_duplicates': self.n_duplicates,
        }


def _check_range(frame: pl.DataFrame, column: str, upper: int, report: EntryValidationReport) -> None:
    bad = frame.filter((pl.col(column) < 1) | (pl.col(column) > upper))
    if bad.height > 0:
        lo, hi = bad[column].min(), bad[column].max()
        report.errors.append(
            f"{bad.height:,} entries with {column} outside 1..{upper} (found {lo}..{hi})"
        )
        report.valid = False


def validate_entries(
    frame: pl.DataFrame,
    m: int,
    n: int,
    raise_on_error: bool = True,
) -> EntryValidationReport:
    """
    Validate an entry frame for an m x n matrix.

    Args:
        frame: Entry frame (row, col, value), 1-indexed
        m: Number of rows of the matrix
        n: Number of columns of the matrix
        raise_on_error: If True, raise EntryValidationError on failure

    Returns:
        EntryValidationReport

    Raises:
        EntryValidationError: If validation fails and raise_on_error=True
    """
    report = EntryValidationReport(n_entries=frame.height)

    if frame.height == 0:
        return report

    null_count = sum(frame[c].null_count() for c in frame.columns)
    if null_count > 0:
        report.errors.append(f"{null_count:,} null fields")
        report.valid = False
        frame = frame.drop_nulls()

    _check_range(frame, 'row', m, report)
    _check_range(frame, 'col', n, report)

    non_finite = frame.filter(~pl.col('value').is_finite()).height
    if non_finite > 0:
        report.errors.append(f"{non_finite:,} non-finite values")
        report.valid = False

    report.n_rows_present = frame['row'].n_unique()
    report.n_cols_present = frame['col'].n_unique()

    report.n_duplicates = frame.height - frame.select(['row', 'col']).unique().height
    if report.n_duplicates > 0:
        report.warnings.append(
            f"{report.n_duplicates:,} duplicate (row, col) entries (treated as summed)"
        )

    for w in report.warnings:
        logger.warning(w)

    if not report.valid and raise_on_error:
        raise EntryValidationError(report.errors, report.warnings)

    return report
