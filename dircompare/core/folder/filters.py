"""
Entry name filtering for directory scanning.

Matches entry basenames against a fixed table of literal names and
single-wildcard glob patterns (``*`` matches any run of characters).
Directory-segment wildcards are not supported.
"""

from __future__ import annotations

import os
import re
from typing import Iterable


#: Names and globs always excluded from a scanned tree.
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    # Package manager directories
    'node_modules',
    '.pnpm-store',
    '.yarn',
    'bower_components',
    'jspm_packages',

    # Build output
    'dist',
    'build',
    'out',
    '.next',
    '.nuxt',
    '.output',
    'target',

    # Version control
    '.git',
    '.svn',
    '.hg',

    # Editors
    '.idea',
    '.vscode',
    '.vs',
    '*.swp',
    '*.swo',
    '.DS_Store',

    # Logs and caches
    '*.log',
    'npm-debug.log*',
    'yarn-debug.log*',
    'yarn-error.log*',
    '.cache',
    '.temp',
    '.tmp',

    # Environment files
    '.env',
    '.env.*',
    '.env.local',
    '.env.*.local',

    # Other
    'coverage',
    '.nyc_output',
    '.eslintcache',
    '.stylelintcache',
    '.prettiercache',
)


class PathFilter:
    """
    Basename matcher for excluded entries.

    Supports:
    - literal names (exact, case-sensitive)
    - ``*`` wildcards, anchored to the whole basename
    """

    def __init__(self, patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS):
        self._literals: set[str] = set()
        self._globs: list[re.Pattern] = []

        for pattern in patterns:
            self._compile_pattern(pattern)

    def _compile_pattern(self, pattern: str) -> None:
        """Compile a single pattern into the literal set or a regex."""
        if not pattern:
            return

        if '*' not in pattern:
            self._literals.add(pattern)
            return

        regex = '.*'.join(re.escape(part) for part in pattern.split('*'))
        self._globs.append(re.compile(f'^{regex}$', re.DOTALL))

    def should_ignore(self, name: str) -> bool:
        """
        Check whether an entry should be excluded.

        Args:
            name: Entry basename. A full path is reduced to its final segment.

        Returns:
            True if the name matches any pattern.
        """
        name = os.path.basename(name) or name

        if name in self._literals:
            return True

        return any(regex.match(name) for regex in self._globs)


_default_filter = PathFilter()


def should_ignore(name: str) -> bool:
    """Check a basename against the default ignore table."""
    return _default_filter.should_ignore(name)
