"""
Folder comparison module.

Provides functionality for:
- Basename filtering against the ignore table
- Directory tree snapshots
- Tree-to-tree comparison
"""

from dircompare.core.folder.filters import (
    PathFilter,
    DEFAULT_IGNORE_PATTERNS,
    should_ignore,
)
from dircompare.core.folder.scanner import (
    TreeBuilder,
    ScanOptions,
    count_entries,
)
from dircompare.core.folder.comparer import (
    TreeDiffer,
    DiffSummary,
    relative_parts,
)

__all__ = [
    # Filters
    'PathFilter',
    'DEFAULT_IGNORE_PATTERNS',
    'should_ignore',
    # Scanner
    'TreeBuilder',
    'ScanOptions',
    'count_entries',
    # Comparer
    'TreeDiffer',
    'DiffSummary',
    'relative_parts',
]
