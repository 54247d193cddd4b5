"""Cancellable completion handles for decode and animation callbacks"""

from typing import Callable, List, Optional

from dozeframe.logger import debug


class PendingTask:
    """Wraps a one-shot completion callback.

    resolve() runs the callback at most once and never after cancel(), so a
    late completion (an animation finishing or a decode arriving after the
    engine was torn down) is a no-op.
    """

    def __init__(self, name: str, callback: Callable[..., None]):
        self.name = name
        self._callback: Optional[Callable[..., None]] = callback
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._done or self._cancelled)

    def resolve(self, *args):
        if not self.pending:
            debug(f"Ignoring late completion for {self.name}")
            return
        self._done = True
        callback, self._callback = self._callback, None
        callback(*args)

    def cancel(self):
        if self.pending:
            self._cancelled = True
            self._callback = None


class TaskTracker:
    """Keeps the outstanding tasks of one component so teardown can cancel them"""

    def __init__(self):
        self._tasks: List[PendingTask] = []

    def track(self, name: str, callback: Callable[..., None]) -> PendingTask:
        self._tasks = [task for task in self._tasks if task.pending]
        task = PendingTask(name, callback)
        self._tasks.append(task)
        return task

    @property
    def outstanding(self) -> List[PendingTask]:
        return [task for task in self._tasks if task.pending]

    def cancel_all(self) -> int:
        """Cancel every pending task, returning how many were cancelled"""
        pending = self.outstanding
        for task in pending:
            task.cancel()
        self._tasks = []
        return len(pending)
