import threading
import time
from typing import Callable, Optional

from .errors import DeadlineExceededError, OperationCancelledError


class StopContext:
    """
    Carries a cancellation signal and an optional deadline through a lifecycle call.

    Every blocking wait in the transport and the poller goes through `sleep()`,
    so cancelling the context (for example from a signal handler on another
    thread) interrupts a long-running poll immediately.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        _event: Optional[threading.Event] = None,
        _deadline: Optional[float] = None,
    ):
        self._clock = clock
        self._event = _event or threading.Event()
        self.deadline = _deadline
        if timeout is not None:
            candidate = clock() + timeout
            if self.deadline is None or candidate < self.deadline:
                self.deadline = candidate

    def with_timeout(self, timeout: float) -> "StopContext":
        """
        Returns a child context sharing this context's cancellation signal,
        with a deadline no later than the parent's.
        """
        return StopContext(
            timeout=timeout,
            clock=self._clock,
            _event=self._event,
            _deadline=self.deadline,
        )

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and self._clock() >= self.deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def raise_if_done(self):
        if self.cancelled:
            raise OperationCancelledError("Operation was cancelled")
        if self.expired:
            raise DeadlineExceededError("Deadline exceeded while waiting for the operation")

    def sleep(self, seconds: float):
        """
        Blocks for up to `seconds`, returning early if the context is cancelled or
        its deadline passes, in which case the matching error is raised.
        """
        self.raise_if_done()
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds > 0:
            self._event.wait(seconds)
        self.raise_if_done()
