import logging
import threading

from core.errors import BackupError

logger = logging.getLogger(__name__)


class TaskRunner:
    """Runs one engine call at a time on a worker thread.

    schedule(callback) must hand the callback back to the UI thread, e.g.
    ``lambda fn: window.after(0, fn)``. The busy flag is only touched on the
    UI thread: it is set in run() and cleared just before the result
    callback fires.
    """

    def __init__(self, schedule, on_busy_change=None):
        self.schedule = schedule
        self.on_busy_change = on_busy_change
        self.busy = False

    def run(self, task, on_success, on_error):
        """Start task unless another one is still running; returns the worker thread or None"""
        if self.busy:
            logger.debug("Ignoring request while another operation is running")
            return None
        self._set_busy(True)

        def _worker():
            try:
                result = task()
            except BackupError as e:
                message = str(e)
                self.schedule(lambda: self._finish(on_error, message))
                return
            except Exception as e:
                logger.exception("Unexpected error in background operation")
                message = f"Unexpected error: {str(e)}"
                self.schedule(lambda: self._finish(on_error, message))
                return
            self.schedule(lambda: self._finish(on_success, result))

        thread = threading.Thread(target=_worker, daemon=True)
        thread.start()
        return thread

    def _finish(self, callback, value):
        self._set_busy(False)
        callback(value)

    def _set_busy(self, busy):
        self.busy = busy
        if self.on_busy_change:
            self.on_busy_change(busy)
