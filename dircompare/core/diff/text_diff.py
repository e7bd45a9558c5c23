"""
Text diff engine.

Provides line-by-line comparison producing maximal runs of added,
removed and unchanged lines with:
- Myers shortest-edit-script diff (minimal below an edit distance cap)
- difflib.SequenceMatcher diff (faster heuristic for large inputs)
- Exact reconstruction of both inputs from the runs
"""

from __future__ import annotations

import difflib
import logging
from enum import Enum, auto
from typing import Optional, Sequence

from dircompare.core.models import DiffTag, LineChange


Opcode = tuple[str, int, int, int, int]


class DiffAlgorithm(Enum):
    """Available diff algorithms."""
    MYERS = auto()             # Minimal edit script
    SEQUENCE_MATCHER = auto()  # difflib matching blocks


def split_lines(text: str) -> list[str]:
    """
    Split text after each newline, keeping the newline with its line.

    ``"\\r\\n"`` stays together; a trailing line without a newline is kept.
    """
    parts = text.split('\n')
    lines = [part + '\n' for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


class LineDiffer:
    """
    Computes line-level diffs between two texts.

    Within a contiguous change the removed run always precedes the
    added run. No intraline refinement is performed.
    """

    #: Edit distance above which MYERS hands over to SequenceMatcher.
    #: The trace grows with the square of the distance.
    DEFAULT_MAX_EDIT_DISTANCE = 1000

    def __init__(
        self,
        algorithm: DiffAlgorithm = DiffAlgorithm.MYERS,
        max_edit_distance: int = DEFAULT_MAX_EDIT_DISTANCE
    ):
        self.algorithm = algorithm
        self.max_edit_distance = max_edit_distance

    def diff_lines(self, old_text: str, new_text: str) -> list[LineChange]:
        """
        Diff two texts line by line.

        Args:
            old_text: Original/left content
            new_text: Modified/right content

        Returns:
            Ordered runs; removed + unchanged runs rebuild ``old_text``,
            added + unchanged runs rebuild ``new_text``
        """
        old_lines = split_lines(old_text)
        new_lines = split_lines(new_text)

        opcodes = self._get_opcodes(old_lines, new_lines)
        return self._build_runs(old_lines, new_lines, opcodes)

    def _get_opcodes(self, old: list[str], new: list[str]) -> list[Opcode]:
        """Get diff opcodes using the configured algorithm."""
        if old == new:
            return [('equal', 0, len(old), 0, len(new))] if old else []

        if self.algorithm == DiffAlgorithm.MYERS:
            opcodes = self._trimmed_myers_opcodes(old, new)
            if opcodes is not None:
                return opcodes
            logging.debug(
                f"LineDiffer - Edit distance above {self.max_edit_distance}, "
                f"using SequenceMatcher"
            )

        matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
        return matcher.get_opcodes()

    def _trimmed_myers_opcodes(self, old: list[str], new: list[str]) -> Optional[list[Opcode]]:
        """Run Myers on the lines between the common prefix and suffix."""
        n, m = len(old), len(new)

        prefix = 0
        while prefix < n and prefix < m and old[prefix] == new[prefix]:
            prefix += 1

        suffix = 0
        while (suffix < n - prefix and suffix < m - prefix
               and old[n - 1 - suffix] == new[m - 1 - suffix]):
            suffix += 1

        middle = self._myers_opcodes(old[prefix:n - suffix], new[prefix:m - suffix])
        if middle is None:
            return None

        opcodes: list[Opcode] = []
        if prefix:
            opcodes.append(('equal', 0, prefix, 0, prefix))
        for tag, i1, i2, j1, j2 in middle:
            opcodes.append((tag, i1 + prefix, i2 + prefix, j1 + prefix, j2 + prefix))
        if suffix:
            opcodes.append(('equal', n - suffix, n, m - suffix, m))
        return opcodes

    def _myers_opcodes(self, old: Sequence[str], new: Sequence[str]) -> Optional[list[Opcode]]:
        """
        Myers O(ND) diff.

        Records the furthest-reaching x per diagonal for each edit
        distance, then walks the trace backwards to recover the path.
        Only diagonals ``-d..d`` are kept for distance ``d``.

        Returns:
            Opcodes, or None if the edit distance exceeds
            ``max_edit_distance``
        """
        n, m = len(old), len(new)
        if not n:
            return [('insert', 0, 0, 0, m)] if m else []
        if not m:
            return [('delete', 0, n, 0, 0)]

        max_d = min(n + m, self.max_edit_distance)
        offset = max_d + 1
        v = [0] * (2 * max_d + 3)
        trace: list[list[int]] = []

        for d in range(max_d + 1):
            trace.append(v[offset - d:offset + d + 1])
            for k in range(-d, d + 1, 2):
                if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                    x = v[offset + k + 1]
                else:
                    x = v[offset + k - 1] + 1
                y = x - k
                while x < n and y < m and old[x] == new[y]:
                    x += 1
                    y += 1
                v[offset + k] = x
                if x >= n and y >= m:
                    return self._backtrack(trace, n, m)

        return None

    @staticmethod
    def _backtrack(trace: list[list[int]], n: int, m: int) -> list[Opcode]:
        steps: list[str] = []
        x, y = n, m

        for d in range(len(trace) - 1, -1, -1):
            # trace[d][i] holds diagonal i - d
            band = trace[d]
            k = x - y
            if d == 0:
                prev_x = prev_y = 0
            else:
                if k == -d or (k != d and band[k - 1 + d] < band[k + 1 + d]):
                    prev_k = k + 1
                else:
                    prev_k = k - 1
                prev_x = band[prev_k + d]
                prev_y = prev_x - prev_k

            while x > prev_x and y > prev_y:
                steps.append('equal')
                x -= 1
                y -= 1

            if d > 0:
                steps.append('insert' if x == prev_x else 'delete')
            x, y = prev_x, prev_y

        steps.reverse()

        opcodes: list[Opcode] = []
        i = j = 0
        for step in steps:
            i2 = i + (step != 'insert')
            j2 = j + (step != 'delete')
            if opcodes and opcodes[-1][0] == step:
                tag, i1, _, j1, _ = opcodes[-1]
                opcodes[-1] = (tag, i1, i2, j1, j2)
            else:
                opcodes.append((step, i, i2, j, j2))
            i, j = i2, j2
        return opcodes

    @staticmethod
    def _build_runs(
        old: list[str],
        new: list[str],
        opcodes: list[Opcode]
    ) -> list[LineChange]:
        """Group opcodes into maximal runs, removed before added."""
        runs: list[LineChange] = []
        removed: list[str] = []
        added: list[str] = []

        def flush_change() -> None:
            if removed:
                runs.append(LineChange(''.join(removed), DiffTag.REMOVED))
                removed.clear()
            if added:
                runs.append(LineChange(''.join(added), DiffTag.ADDED))
                added.clear()

        for tag, i1, i2, j1, j2 in opcodes:
            if tag == 'equal':
                if i1 == i2:
                    continue
                flush_change()
                value = ''.join(old[i1:i2])
                if runs and runs[-1].tag == DiffTag.UNCHANGED:
                    value = runs.pop().value + value
                runs.append(LineChange(value, DiffTag.UNCHANGED))
            else:
                removed.extend(old[i1:i2])
                added.extend(new[j1:j2])

        flush_change()
        return runs
