"""Cancellable one-shot timers used by calibration and the silence timeout."""
import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    """Handle of a scheduled one-shot callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not started yet."""


# (delay_seconds, callback) -> started timer
TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def start_thread_timer(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
    """Start a daemon threading.Timer and return it as the handle."""
    timer = threading.Timer(delay_s, callback)
    timer.daemon = True
    timer.start()
    return timer
