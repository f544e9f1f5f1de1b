"""
Errors raised by the tall-skinny SVD pipeline.

Every error is fatal to the call that raised it. Nothing here is retried
internally; callers that want to retry (e.g. with a lower threshold) do so
themselves.
"""

from typing import List


class TSSVDError(Exception):
    """Base class for all tssvd errors."""


class InvalidShapeError(TSSVDError, ValueError):
    """Raised when (m, n) does not describe a tall and skinny matrix."""

    def __init__(self, m: int, n: int):
        self.m = m
        self.n = n
        super().__init__(
            f"Expecting a tall and skinny matrix (m >= n > 0), got m={m}, n={n}"
        )


class InvalidThresholdError(TSSVDError, ValueError):
    """Raised when the minimum singular value is below the numerical floor."""

    def __init__(self, min_svalue: float, floor: float = 1.0e-8):
        self.min_svalue = min_svalue
        self.floor = floor
        super().__init__(
            f"Minimum singular value requested is too small: {min_svalue} (floor {floor})"
        )


class NoSingularValuesAboveThresholdError(TSSVDError):
    """Raised when every singular value falls below min_svalue."""

    def __init__(self, min_svalue: float):
        self.min_svalue = min_svalue
        super().__init__(
            f"All singular values are smaller than min_svalue: {min_svalue}"
        )


class EntryValidationError(TSSVDError, ValueError):
    """Raised when matrix entries fail validation."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []

        message = "Entry validation failed:\n" + "\n".join(
            f"  ERROR: {e}" for e in errors
        )
        if self.warnings:
            message += "\n" + "\n".join(f"  WARNING: {w}" for w in self.warnings)

        super().__init__(message)


class EigensolverError(TSSVDError):
    """Raised when the dense eigensolver fails to converge."""


class ConfigError(TSSVDError):
    """Raised for unknown or invalid configuration values."""
