"""Run background tasks and wait for them to finish, fail or be closed."""

import threading
from collections import deque
from typing import Callable, Optional


class Cycle:
    """A group of background tasks sharing one life cycle."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._errors: deque = deque()
        self._closed = False
        self._waiting = False
        self._active = 0
        self._count = 0
        self._done = threading.Event()

    def run(self, fn: Callable[[], object]) -> None:
        """Start ``fn`` in a new thread; an exception it raises ends the wait."""
        with self._cond:
            self._active += 1
            self._count += 1
        threading.Thread(target=self._call, args=(fn,), daemon=True).start()

    def _call(self, fn: Callable[[], object]) -> None:
        try:
            fn()
        except Exception as exc:  # noqa: BLE001 - every failure is reported to the waiter
            with self._cond:
                if not self._closed:
                    self._errors.append(exc)
                    self._cond.notify_all()
        finally:
            with self._cond:
                self._active -= 1
                if self._active == 0 and self._waiting:
                    self._done.set()

    def done(self) -> threading.Event:
        """Return an event that is set once every started task has returned."""
        with self._cond:
            if not self._waiting:
                self._waiting = True
                if self._active == 0:
                    self._done.set()
        return self._done

    def done_and_close(self) -> None:
        """Wait for every task to return, then close the cycle."""
        self.done().wait()
        self.close()

    def close(self) -> None:
        """Close the cycle, releasing anyone blocked in :meth:`wait`."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def wait(self, hang: bool) -> Optional[BaseException]:
        """Block until a task fails or the cycle closes.

        Returns the failure, or None when the cycle closed. With no tasks
        started and ``hang`` false the cycle closes at once.
        """
        with self._cond:
            if self._count == 0 and not hang:
                self._closed = True
            while not self._errors and not self._closed:
                self._cond.wait()
            if self._errors:
                return self._errors.popleft()
            return None