"""
Cancellation and deadline token passed through every registry operation.
Thread-safe: cancel() may be called from another thread while a request is in flight.
"""

from __future__ import annotations

import threading
import time
import weakref

from tfe_registry.errors import DeadlineExceeded, OperationCancelled


class Context:
    """
    Carries a cancellation flag and an optional absolute deadline (time.monotonic()).
    Cancelling a context cancels every context derived from it, never its parent.
    """

    def __init__(
        self, deadline: float | None = None, parent: Context | None = None
    ) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: weakref.WeakSet[Context] = weakref.WeakSet()
        if parent is not None:
            if parent.deadline is not None:
                deadline = (
                    parent.deadline
                    if deadline is None
                    else min(deadline, parent.deadline)
                )
            parent._adopt(self)
        self._deadline = deadline

    @classmethod
    def background(cls) -> Context:
        """A context that is never cancelled and has no deadline."""
        return cls()

    def with_timeout(self, seconds: float) -> Context:
        return Context(deadline=time.monotonic() + seconds, parent=self)

    def with_deadline(self, deadline: float) -> Context:
        return Context(deadline=deadline, parent=self)

    def _adopt(self, child: Context) -> None:
        with self._lock:
            self._children.add(child)
            cancelled = self._event.is_set()
        if cancelled:
            child.cancel()

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def cancel(self) -> None:
        with self._lock:
            self._event.set()
            children = list(self._children)
        for child in children:
            child.cancel()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """
        Raises:
            OperationCancelled: if cancel() was called on this context or a parent.
            DeadlineExceeded: if the deadline has passed.
        """
        if self.cancelled:
            raise OperationCancelled("context cancelled")
        if self.expired():
            raise DeadlineExceeded("context deadline exceeded")

    def sleep(self, seconds: float) -> None:
        """Sleep up to seconds, waking early and raising if cancelled or past the deadline."""
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
            self.check()
            raise DeadlineExceeded("context deadline exceeded")
        self._event.wait(seconds)
        self.check()
