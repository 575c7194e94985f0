import contextlib
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def _spawn_thread(target, *args):
    worker = threading.Thread(target=target, args=args, daemon=True)
    worker.start()
    return worker


class PeriodicTask:
    """Handle for a repeating background callback.

    Cancelling is idempotent and a cancelled task never calls back again, even
    when it was already sleeping towards its next run.
    """

    def __init__(self, interval: float, callback: Callable[[], None], sleep=time.sleep, lock=None):
        self.interval = interval
        self._callback = callback
        self._sleep = sleep
        self._lock = lock
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def _guard(self):
        return self._lock if self._lock is not None else contextlib.nullcontext()

    def run(self) -> None:
        while not self._cancelled:
            self._sleep(self.interval)
            with self._guard():
                if self._cancelled:
                    return
                try:
                    self._callback()
                except Exception:
                    # A failing listener must not kill the round clock
                    logger.exception('[task-error] periodic callback raised')


class Scheduler:
    """Starts :class:`PeriodicTask` instances on background workers.

    ``spawn`` and ``sleep`` default to plain threads; the web app passes
    ``socketio.start_background_task`` and ``socketio.sleep`` so ticks follow
    the Socket.IO async mode. When ``lock`` is given every callback runs while
    holding it.
    """

    def __init__(self, spawn: Optional[Callable] = None, sleep: Optional[Callable] = None, lock=None):
        self._spawn = spawn or _spawn_thread
        self._sleep = sleep or time.sleep
        self._lock = lock

    def every(self, interval: float, callback: Callable[[], None]) -> PeriodicTask:
        task = PeriodicTask(interval, callback, sleep=self._sleep, lock=self._lock)
        self._spawn(task.run)
        return task
