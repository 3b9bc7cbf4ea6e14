import threading

from core.errors import BackupNotFound
from ui.tasks import TaskRunner


class UiQueue:
    """Stands in for the Tk event loop: callbacks wait until drain()"""

    def __init__(self):
        self.pending = []

    def __call__(self, callback):
        self.pending.append(callback)

    def drain(self):
        while self.pending:
            self.pending.pop(0)()


def test_second_operation_is_refused_while_one_is_running():
    ui = UiQueue()
    states = []
    results = []
    runner = TaskRunner(ui, states.append)
    release = threading.Event()

    restore = runner.run(lambda: release.wait(5) and "restored", results.append, results.append)
    assert runner.busy
    assert runner.run(lambda: "quick backup", results.append, results.append) is None

    release.set()
    restore.join(5)
    assert runner.busy
    ui.drain()

    assert results == ["restored"]
    assert not runner.busy
    assert states == [True, False]

    quick = runner.run(lambda: "quick backup", results.append, results.append)
    quick.join(5)
    ui.drain()
    assert results == ["restored", "quick backup"]


def test_backup_errors_are_reported():
    ui = UiQueue()
    errors = []
    runner = TaskRunner(ui)

    def task():
        raise BackupNotFound("ghost")

    runner.run(task, lambda result: None, errors.append).join(5)
    ui.drain()

    assert errors == ["Backup not found: ghost"]
    assert not runner.busy


def test_unexpected_errors_are_reported_and_release_the_runner():
    ui = UiQueue()
    errors = []
    runner = TaskRunner(ui)

    def task():
        raise PermissionError("access denied")

    runner.run(task, lambda result: None, errors.append).join(5)
    ui.drain()

    assert errors == ["Unexpected error: access denied"]
    assert not runner.busy
