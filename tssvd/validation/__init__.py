"""
TSSVD Validation Module

Exports:
    - check_shape: Require a tall and skinny shape (m >= n > 0)
    - check_threshold: Require min_svalue >= MIN_SVALUE_FLOOR
    - validate_entries: Validate an entry frame against (m, n)
    - EntryValidationReport: Report returned by validate_entries
"""

from .preconditions import (
    check_shape,
    check_threshold,
    MIN_SVALUE_FLOOR,
)

from .entries import (
    validate_entries,
    EntryValidationReport,
)

__all__ = [
    'check_shape',
    'check_threshold',
    'MIN_SVALUE_FLOOR',
    'validate_entries',
    'EntryValidationReport',
]
