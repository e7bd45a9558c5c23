"""
Workers for folder and file comparison requests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject

from dircompare.core.models import FileDiff
from dircompare.services.comparison import ComparisonService, TreeResult
from dircompare.workers.base_worker import BaseWorker


class FolderCompareWorker(BaseWorker):
    """
    Builds a folder tree, diffed against a second folder if one is given.

    The result value is a tree, a diff tree, or None if the folder
    could not be opened.
    """

    def __init__(
        self,
        service: ComparisonService,
        path: str | Path,
        compare_path: Optional[str | Path] = None,
        channel: str = "tree",
        parent: Optional[QObject] = None
    ):
        super().__init__(service.requests, channel, parent=parent)
        self.service = service
        self.path = Path(path)
        self.compare_path = Path(compare_path) if compare_path is not None else None

    def compute(self) -> Optional[TreeResult]:
        self.report_status(f"Scanning {self.path.name}...")
        value = self.service.build_and_compare(self.path, self.compare_path)
        self.report_status("Complete")
        return value


class FileDiffWorker(BaseWorker):
    """Diffs two text files; the result value is a FileDiff or None."""

    def __init__(
        self,
        service: ComparisonService,
        left_path: str | Path,
        right_path: str | Path,
        channel: str = "file",
        parent: Optional[QObject] = None
    ):
        super().__init__(service.requests, channel, parent=parent)
        self.service = service
        self.left_path = Path(left_path)
        self.right_path = Path(right_path)

    def compute(self) -> Optional[FileDiff]:
        self.report_status(f"Comparing {self.left_path.name}...")
        value = self.service.diff_files(self.left_path, self.right_path)
        self.report_status("Complete")
        return value
