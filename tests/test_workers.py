"""Tests for background comparison workers."""

import pytest

from conftest import make_tree
from dircompare.core.models import DiffNode, FileDiff
from dircompare.services.comparison import ComparisonService, RequestTracker
from dircompare.workers.base_worker import BaseWorker, WorkerResult, WorkerState, WorkerThread
from dircompare.workers.compare_worker import FileDiffWorker, FolderCompareWorker


class Recorder:
    """Collects signals emitted by a worker."""

    def __init__(self, worker: BaseWorker):
        self.finished = []
        self.superseded = []
        self.errors = []
        self.cancelled = 0
        self.statuses = []
        worker.signals.finished.connect(self.finished.append)
        worker.signals.superseded.connect(self.superseded.append)
        worker.signals.error.connect(lambda kind, message: self.errors.append((kind, message)))
        worker.signals.cancelled.connect(self._on_cancelled)
        worker.signals.status.connect(self.statuses.append)

    def _on_cancelled(self):
        self.cancelled += 1


class FailingWorker(BaseWorker):

    def compute(self):
        raise RuntimeError("broken")


@pytest.fixture
def service():
    return ComparisonService()


def test_folder_compare_worker(qapp, service, left_right):
    left, right = left_right
    make_tree(left, {'a.txt': 'new'})
    make_tree(right, {'a.txt': 'old'})
    worker = FolderCompareWorker(service, left, right)
    recorder = Recorder(worker)

    worker.run()

    assert worker.state == WorkerState.COMPLETED
    (result,) = recorder.finished
    assert isinstance(result, WorkerResult)
    assert result.channel == 'tree'
    assert result.request_id == worker.request_id
    assert isinstance(result.value, DiffNode)
    assert worker.result is result
    assert recorder.statuses[-1] == "Complete"


def test_file_diff_worker(qapp, service, tmp_path):
    (tmp_path / 'a.txt').write_text('a\n')
    (tmp_path / 'b.txt').write_text('b\n')
    worker = FileDiffWorker(service, tmp_path / 'a.txt', tmp_path / 'b.txt')
    recorder = Recorder(worker)

    worker.run()

    (result,) = recorder.finished
    assert result.channel == 'file'
    assert isinstance(result.value, FileDiff)
    assert not result.value.is_identical


def test_failed_root_yields_none(qapp, service, tmp_path):
    worker = FolderCompareWorker(service, tmp_path / 'missing')
    recorder = Recorder(worker)

    worker.run()

    assert recorder.finished[0].value is None
    assert recorder.errors == []


def test_older_request_is_superseded(qapp, service, tmp_path):
    make_tree(tmp_path / 'one', {'x': ''})
    make_tree(tmp_path / 'two', {'y': ''})
    first = FolderCompareWorker(service, tmp_path / 'one')
    second = FolderCompareWorker(service, tmp_path / 'two')
    first_recorder = Recorder(first)
    second_recorder = Recorder(second)

    # The older request finishes last
    second.run()
    first.run()

    assert not first.is_current
    assert first_recorder.finished == []
    assert first_recorder.superseded[0].request_id == first.request_id
    assert first.state == WorkerState.SUPERSEDED
    assert second.is_current
    assert second_recorder.finished[0].value.name == 'two'


def test_channels_are_independent(qapp, service, tmp_path):
    make_tree(tmp_path / 'one', {})
    (tmp_path / 'a.txt').write_text('a')
    tree_worker = FolderCompareWorker(service, tmp_path / 'one')
    FileDiffWorker(service, tmp_path / 'a.txt', tmp_path / 'a.txt')
    recorder = Recorder(tree_worker)

    tree_worker.run()

    assert tree_worker.is_current
    assert len(recorder.finished) == 1


def test_cancelled_worker_emits_no_result(qapp, service, tmp_path):
    make_tree(tmp_path / 'one', {})
    worker = FolderCompareWorker(service, tmp_path / 'one')
    recorder = Recorder(worker)

    worker.cancel()
    worker.run()

    assert recorder.finished == []
    assert recorder.cancelled == 1
    assert worker.state == WorkerState.CANCELLED
    assert worker.result is None


def test_exception_is_reported(qapp):
    worker = FailingWorker(RequestTracker(), 'tree')
    recorder = Recorder(worker)

    worker.run()

    assert recorder.errors == [('RuntimeError', 'broken')]
    assert worker.state == WorkerState.FAILED
    assert worker.error == ('RuntimeError', 'broken')


def test_worker_thread_runs_off_the_caller_thread(qapp, service, left_right):
    left, right = left_right
    make_tree(left, {'a.txt': 'x'})
    make_tree(right, {'a.txt': 'x'})
    worker = FolderCompareWorker(service, left, right)
    thread = WorkerThread(worker)

    thread.start()

    assert thread.wait(10_000)
    assert worker.state == WorkerState.COMPLETED
    assert not worker.result.value.has_differences
