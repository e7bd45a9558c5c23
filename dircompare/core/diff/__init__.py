"""
Diff module for file comparison operations.

Provides the line-level text diff engine.
"""

from dircompare.core.diff.text_diff import (
    LineDiffer,
    DiffAlgorithm,
    split_lines,
)

__all__ = [
    'LineDiffer',
    'DiffAlgorithm',
    'split_lines',
]
