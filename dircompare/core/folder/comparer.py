"""
Folder comparison engine.

Diffs two directory tree snapshots into a single left-rooted tree
annotated with:
- Added entries (left only)
- Removed entries (right only, copied into the result)
- Modified entries (content or type differs, or a descendant changed)
- Unchanged entries
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dircompare.core.models import DiffNode, DiffTag, DirNode, FileNode, Node
from dircompare.services.file_io import FileIOService


RelativePath = tuple[str, ...]


def relative_parts(path: Path | str, root: Path | str) -> RelativePath:
    """
    Get the path segments of ``path`` below ``root``.

    Matching is segment-wise, so ``/foo`` is not a parent of ``/foobar``.

    Raises:
        ValueError: If ``path`` is not ``root`` or below it
    """
    return Path(path).relative_to(Path(root)).parts


@dataclass
class DiffSummary:
    """Counts of tagged entries in a diff tree."""
    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0
    directories: int = 0

    @property
    def total_differences(self) -> int:
        return self.added + self.removed + self.modified

    @property
    def is_identical(self) -> bool:
        return self.total_differences == 0

    def __str__(self) -> str:
        return (f"Added: {self.added}, Removed: {self.removed}, "
                f"Modified: {self.modified}, Unchanged: {self.unchanged}, "
                f"Dirs: {self.directories}")


class TreeDiffer:
    """
    Diffs two tree snapshots.

    The result is a new tree of DiffNode objects; neither input tree is
    modified. File pairs are compared by exact content, and a pair that
    cannot be read is reported as modified.
    """

    def __init__(self, file_io: Optional[FileIOService] = None):
        self.file_io = file_io or FileIOService()

    def diff_trees(
        self,
        left: Node,
        left_root: Path | str,
        right: Node,
        right_root: Path | str
    ) -> DiffNode:
        """
        Diff ``left`` against ``right``.

        Args:
            left: Tree snapshot for the new/left side
            left_root: Root path that left node paths are relative to;
                relative roots resolve against the working directory
            right: Tree snapshot for the old/right side
            right_root: Root path that right node paths are relative to

        Returns:
            Annotated left-rooted tree, with right-only entries appended
        """
        left_root = Path(os.path.abspath(left_root))
        right_root = Path(os.path.abspath(right_root))

        right_map: dict[RelativePath, Node] = {}
        for node in right.iter_all():
            right_map[relative_parts(node.path, right_root)] = node

        result = self._diff_node(left, left_root, right_map)
        logging.debug(f"TreeDiffer - {left_root} vs {right_root}: {self.summarize(result)}")
        return result

    def _diff_node(
        self,
        node: Node,
        left_root: Path,
        right_map: dict[RelativePath, Node]
    ) -> DiffNode:
        rel_path = relative_parts(node.path, left_root)
        counterpart = right_map.get(rel_path)

        if counterpart is None:
            return self._tag_subtree(node, DiffTag.ADDED)

        if isinstance(node, FileNode):
            if isinstance(counterpart, FileNode):
                return DiffNode(node=node, tag=self._compare_files(node, counterpart))
            return self._tag_subtree(node, DiffTag.MODIFIED, DiffTag.ADDED)

        if isinstance(counterpart, FileNode):
            return self._tag_subtree(node, DiffTag.MODIFIED, DiffTag.ADDED)

        children = [self._diff_node(child, left_root, right_map) for child in node.children]
        has_changes = any(child.tag != DiffTag.UNCHANGED for child in children)

        left_names = {child.name for child in node.children}
        for right_child in counterpart.children:
            if right_child.name not in left_names:
                children.append(self._tag_subtree(right_child, DiffTag.REMOVED, synthesized=True))
                has_changes = True

        return DiffNode(
            node=node,
            tag=DiffTag.MODIFIED if has_changes else DiffTag.UNCHANGED,
            children=children,
        )

    def _compare_files(self, left: FileNode, right: FileNode) -> DiffTag:
        if left.path == right.path:
            return DiffTag.UNCHANGED

        try:
            same = self.file_io.files_equal(left.path, right.path)
        except OSError as e:
            logging.warning(f"TreeDiffer - Cannot compare {left.path} with {right.path}: {e}")
            return DiffTag.MODIFIED

        return DiffTag.UNCHANGED if same else DiffTag.MODIFIED

    def _tag_subtree(
        self,
        node: Node,
        tag: DiffTag,
        descendant_tag: Optional[DiffTag] = None,
        synthesized: bool = False
    ) -> DiffNode:
        """Tag ``node`` and give every descendant ``descendant_tag``."""
        descendant_tag = descendant_tag or tag
        children = []
        if isinstance(node, DirNode):
            children = [
                self._tag_subtree(child, descendant_tag, synthesized=synthesized)
                for child in node.children
            ]
        return DiffNode(node=node, tag=tag, children=children, synthesized=synthesized)

    @staticmethod
    def summarize(root: DiffNode) -> DiffSummary:
        """Count tags over file entries; directories are counted separately."""
        summary = DiffSummary()
        for node in root.iter_all():
            if node.is_directory:
                summary.directories += 1
                continue
            if node.tag == DiffTag.ADDED:
                summary.added += 1
            elif node.tag == DiffTag.REMOVED:
                summary.removed += 1
            elif node.tag == DiffTag.MODIFIED:
                summary.modified += 1
            else:
                summary.unchanged += 1
        return summary
