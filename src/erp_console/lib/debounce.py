"""
Debounce helper for rapidly changing inputs.

A Debouncer forwards a value to its callback only after no newer value has
been submitted for ``delay`` seconds. Each submit cancels the pending timer
and schedules a fresh one, so intermediate values are dropped and only the
last one survives.
"""

from threading import Lock, Timer
from typing import Any, Callable, Generic, Protocol, TypeVar

T = TypeVar("T")


class _Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


def thread_timer(delay: float, fn: Callable[[], None]) -> _Timer:
    timer = Timer(delay, fn)
    timer.daemon = True
    return timer


class Debouncer(Generic[T]):
    """
    Last-write-wins delayed delivery of a value.

    Attributes:
        delay: Quiet period in seconds before the callback fires.
    """

    def __init__(
        self,
        callback: Callable[[T], Any],
        delay: float,
        timer_factory: TimerFactory = thread_timer,
    ) -> None:
        """
        Args:
            callback: Receives the settled value.
            delay: Quiet period in seconds.
            timer_factory: Builds a startable, cancellable timer. Defaults to
                a daemon threading.Timer.
        """
        self.delay = delay
        self._callback = callback
        self._timer_factory = timer_factory
        self._lock = Lock()
        self._timer: _Timer | None = None
        self._pending: tuple[T] | None = None
        # bumped on every submit and cancel; a timer only delivers for its own generation
        self._generation = 0

    @property
    def pending(self) -> bool:
        """True while a value is waiting for the quiet period to elapse."""
        return self._pending is not None

    def submit(self, value: T) -> None:
        """Replace any pending value with ``value`` and restart the delay."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._pending = (value,)
            self._timer = self._timer_factory(self.delay, lambda: self._fire(generation))
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending value without delivering it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = None
            self._pending = None

    def flush(self) -> None:
        """Deliver the pending value now, if there is one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            generation = self._generation
        self._fire(generation)

    def _fire(self, generation: int) -> None:
        with self._lock:
            # a timer that started running before a newer submit cancelled it
            if generation != self._generation:
                return
            pending = self._pending
            self._pending = None
            self._timer = None
        if pending is not None:
            self._callback(pending[0])
