"""Text triplet I/O for entry frames."""

from tssvd.io.reader import load_entries
from tssvd.io.writer import write_entries

__all__ = ['load_entries', 'write_entries']
