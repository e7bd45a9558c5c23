"""
Comparison service.

Entry point used by the presentation layer:
- Build a folder tree, optionally diffed against a second folder
- Diff a pair of text files line by line
- Issue request ids so callers can discard stale results
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from dircompare.core.diff.text_diff import LineDiffer
from dircompare.core.errors import BinaryContentError, ContentReadError, RootAccessError
from dircompare.core.folder.comparer import TreeDiffer
from dircompare.core.folder.scanner import ScanOptions, TreeBuilder
from dircompare.core.models import DiffNode, DirNode, FileDiff, Node
from dircompare.services.file_io import FileIOService
from dircompare.services.settings import ApplicationSettings


TreeResult = Union[Node, DiffNode]


class RequestTracker:
    """
    Hands out increasing request ids per channel.

    Only the most recently issued id of a channel is current; results
    carrying an older id should be dropped by the caller.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._latest: dict[str, int] = {}

    def next_id(self, channel: str) -> int:
        with self._lock:
            request_id = self._latest.get(channel, 0) + 1
            self._latest[channel] = request_id
            return request_id

    def is_current(self, channel: str, request_id: int) -> bool:
        with self._lock:
            return self._latest.get(channel) == request_id


class ComparisonService:
    """
    Orchestrates tree building, tree diffing and file diffing.

    Holds no per-request state: every call builds fresh trees. Failures
    are logged and reported as ``None``.
    """

    def __init__(
        self,
        tree_builder: Optional[TreeBuilder] = None,
        tree_differ: Optional[TreeDiffer] = None,
        line_differ: Optional[LineDiffer] = None,
        file_io: Optional[FileIOService] = None,
        max_text_size: Optional[int] = None
    ):
        self.file_io = file_io or FileIOService()
        self.tree_builder = tree_builder or TreeBuilder()
        self.tree_differ = tree_differ or TreeDiffer(self.file_io)
        self.line_differ = line_differ or LineDiffer()
        self.max_text_size = max_text_size
        self.requests = RequestTracker()

    @classmethod
    def from_settings(cls, settings: ApplicationSettings) -> 'ComparisonService':
        """Create a service configured from application settings."""
        file_io = FileIOService(
            default_encoding=settings.text.default_encoding,
            binary_check_size=settings.text.binary_check_size,
        )
        return cls(
            tree_builder=TreeBuilder(ScanOptions(max_workers=settings.scan.max_workers)),
            tree_differ=TreeDiffer(file_io),
            line_differ=LineDiffer(settings.text.algorithm, settings.text.max_edit_distance),
            file_io=file_io,
            max_text_size=settings.text.max_text_size,
        )

    def build_and_compare(
        self,
        path: Path | str,
        compare_path: Optional[Path | str] = None
    ) -> Optional[TreeResult]:
        """
        Build the tree at ``path``, diffed against ``compare_path`` if given.

        Args:
            path: Folder (or file) to snapshot
            compare_path: Folder to diff against

        Returns:
            A DiffNode tree when both roots are directories, otherwise the
            plain snapshot. None if ``path`` cannot be opened.
        """
        try:
            tree = self.tree_builder.build_tree(path)
        except RootAccessError as e:
            logging.error(f"ComparisonService - Could not open {path}: {e.detail}")
            return None

        if compare_path is None or not isinstance(tree, DirNode):
            return tree

        try:
            compare_tree = self.tree_builder.build_tree(compare_path)
        except RootAccessError as e:
            logging.warning(f"ComparisonService - Comparison skipped, could not open {compare_path}: {e.detail}")
            return tree

        if not isinstance(compare_tree, DirNode):
            logging.info(f"ComparisonService - Comparison skipped, {compare_path} is not a directory")
            return tree

        logging.info(f"ComparisonService - Comparing {tree.path} with {compare_tree.path}")
        return self.tree_differ.diff_trees(tree, tree.path, compare_tree, compare_tree.path)

    def build_and_compare_request(
        self,
        path: Path | str,
        compare_path: Optional[Path | str] = None,
        channel: str = "tree"
    ) -> tuple[int, Optional[TreeResult]]:
        """Run `build_and_compare` under a fresh request id for ``channel``."""
        request_id = self.requests.next_id(channel)
        return request_id, self.build_and_compare(path, compare_path)

    def diff_files_request(
        self,
        left_path: Path | str,
        right_path: Path | str,
        channel: str = "file"
    ) -> tuple[int, Optional[FileDiff]]:
        """Run `diff_files` under a fresh request id for ``channel``."""
        request_id = self.requests.next_id(channel)
        return request_id, self.diff_files(left_path, right_path)

    def diff_files(self, left_path: Path | str, right_path: Path | str) -> Optional[FileDiff]:
        """
        Diff two text files line by line.

        Returns:
            FileDiff with line runs; a FileDiff flagged ``is_binary`` if
            either file looks binary; None if either file cannot be read.
        """
        contents = []
        is_binary = False

        for path in (left_path, right_path):
            try:
                contents.append(self.file_io.read_text(path, max_size=self.max_text_size))
            except BinaryContentError as e:
                logging.info(f"ComparisonService - Not diffing binary content: {e}")
                is_binary = True
            except ContentReadError as e:
                logging.error(f"ComparisonService - Could not read {path}: {e.detail}")
                return None

        if is_binary:
            return FileDiff(old_content='', new_content='', is_binary=True)

        left, right = contents
        return FileDiff(
            old_content=left.text,
            new_content=right.text,
            changes=self.line_differ.diff_lines(left.text, right.text),
            encoding_left=left.encoding,
            encoding_right=right.encoding,
        )
