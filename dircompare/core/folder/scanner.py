"""
Directory tree builder for folder comparison.

Snapshots a directory into an immutable node tree with:
- Basename filtering against the ignore table
- Per-entry error resilience (failed entries are omitted and logged)
- Optional fan-out of root-level subtrees over a bounded thread pool
"""

from __future__ import annotations

import logging
import os
import stat
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from dircompare.core.errors import EntryAccessError, RootAccessError
from dircompare.core.folder.filters import PathFilter
from dircompare.core.models import DirNode, FileNode, Node


@dataclass
class ScanOptions:
    """Options for tree building."""
    # Threads used to build root-level subtrees; 1 means a sequential walk.
    # Each thread holds at most one directory handle open at a time.
    max_workers: int = 1


class TreeBuilder:
    """
    Builds in-memory snapshots of directory trees.

    Symbolic links are never followed; like other special entries they
    are skipped with a warning.
    """

    def __init__(
        self,
        options: Optional[ScanOptions] = None,
        path_filter: Optional[PathFilter] = None
    ):
        self.options = options or ScanOptions()
        self.path_filter = path_filter or PathFilter()

    def build_tree(self, root_path: Path | str) -> Node:
        """
        Build a snapshot of the tree at ``root_path``.

        Args:
            root_path: File or directory to snapshot

        Returns:
            A FileNode if the root is a regular file, otherwise a DirNode

        Raises:
            RootAccessError: If the root does not exist or cannot be listed
        """
        root_path = Path(os.path.abspath(root_path))

        try:
            stat_result = root_path.stat()
        except OSError as e:
            logging.error(f"TreeBuilder - Cannot access root {root_path}: {e}")
            raise RootAccessError(root_path, "Cannot access root", e) from e

        if stat.S_ISREG(stat_result.st_mode):
            return self._file_node(root_path, stat_result)

        if not stat.S_ISDIR(stat_result.st_mode):
            logging.error(f"TreeBuilder - Root is not a file or directory: {root_path}")
            raise RootAccessError(root_path, "Not a file or directory")

        try:
            names = self._list_names(root_path)
        except OSError as e:
            logging.error(f"TreeBuilder - Cannot list root {root_path}: {e}")
            raise RootAccessError(root_path, "Cannot list root", e) from e

        if self.options.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.options.max_workers) as executor:
                children = self._build_children(root_path, names, executor)
        else:
            children = self._build_children(root_path, names)

        logging.debug(f"TreeBuilder - Built {root_path} with {len(children)} top-level entries")
        return DirNode(path=root_path, name=self._name_of(root_path), children=children)

    def _build_children(
        self,
        dir_path: Path,
        names: list[str],
        executor: Optional[Executor] = None
    ) -> tuple[Node, ...]:
        """Build the surviving children of a directory, in listing order."""
        paths = [dir_path / name for name in names if not self.path_filter.should_ignore(name)]

        if executor is not None:
            futures = [executor.submit(self._build_entry, path) for path in paths]
            outcomes = []
            for path, future in zip(paths, futures):
                try:
                    outcomes.append(future.result())
                except EntryAccessError as e:
                    logging.warning(f"TreeBuilder - Skipping entry {path}: {e.detail}")
            return tuple(outcomes)

        children = []
        for path in paths:
            try:
                children.append(self._build_entry(path))
            except EntryAccessError as e:
                logging.warning(f"TreeBuilder - Skipping entry {path}: {e.detail}")
        return tuple(children)

    def _build_entry(self, path: Path) -> Node:
        """Build the node for one entry below the root."""
        try:
            stat_result = path.lstat()
        except OSError as e:
            raise EntryAccessError(path, "Cannot stat entry", e) from e

        mode = stat_result.st_mode

        if stat.S_ISLNK(mode):
            raise EntryAccessError(path, "Symbolic link not followed")

        if stat.S_ISREG(mode):
            return self._file_node(path, stat_result)

        if not stat.S_ISDIR(mode):
            raise EntryAccessError(path, "Unsupported entry type")

        try:
            names = self._list_names(path)
        except OSError as e:
            raise EntryAccessError(path, "Cannot list directory", e) from e

        return DirNode(path=path, name=path.name, children=self._build_children(path, names))

    @staticmethod
    def _list_names(dir_path: Path) -> list[str]:
        with os.scandir(dir_path) as it:
            return [entry.name for entry in it]

    def _file_node(self, path: Path, stat_result: os.stat_result) -> FileNode:
        return FileNode(
            path=path,
            name=self._name_of(path),
            size=stat_result.st_size,
            modified_time=datetime.fromtimestamp(stat_result.st_mtime),
        )

    @staticmethod
    def _name_of(path: Path) -> str:
        # The filesystem root has no final segment
        return path.name or str(path)


def count_entries(node: Node) -> int:
    """Count the entries below ``node`` (the node itself excluded)."""
    return sum(1 for _ in node.iter_all()) - 1
