"""
Background workers for non-blocking operations.

Provides QThread-based workers for:
- Folder tree building and comparison
- File diffing

Each worker serves one request id; results of superseded requests
are reported separately from the latest one.
"""

from dircompare.workers.base_worker import (
    BaseWorker,
    WorkerResult,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from dircompare.workers.compare_worker import (
    FolderCompareWorker,
    FileDiffWorker,
)

__all__ = [
    # Base
    'BaseWorker',
    'WorkerResult',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Compare
    'FolderCompareWorker',
    'FileDiffWorker',
]
