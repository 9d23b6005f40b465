"""Cancellable thread that calls a function at a fixed interval."""

import threading
from traceback import print_exc
from typing import Callable


class RepeatingTimer(threading.Thread):
    """Daemon thread calling `function` every `interval` seconds until stopped.

    The first call happens one interval after start(). Exceptions raised by
    the function are printed and the timer keeps running.

    Example:
        >>> timer = RepeatingTimer(1.0, tracker.remove_expired, name="Expiry")
        >>> timer.start()
        >>> # Later...
        >>> timer.stop()
    """

    def __init__(self, interval: float, function: Callable[[], object], name: str = "RepeatingTimer") -> None:
        if interval <= 0:
            raise ValueError(f"RepeatingTimer: interval must be positive, got {interval}")
        super().__init__(daemon=True, name=name)

        self.interval: float = interval
        self._function: Callable[[], object] = function
        self._stop_event = threading.Event()

    def run(self) -> None:
        # wait() returns True once stop() sets the event
        while not self._stop_event.wait(self.interval):
            try:
                self._function()
            except Exception as e:
                print(f"{self.name}: Error in timer function: {e}")
                print_exc()

    @property
    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the timer thread and wait for it to exit."""
        self._stop_event.set()

        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout=timeout)
            if self.is_alive():
                print(f"WARNING: {self.name} thread did not exit cleanly within timeout")
