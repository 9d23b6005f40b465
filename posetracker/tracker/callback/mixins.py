"""Callback mixin for tracker lifecycle notifications."""

from threading import Lock
from traceback import print_exc

from posetracker.tracker.PoseTracker import PoseTracker, PoseTrackerCallback


class TrackerCallbackMixin:
    """Mixin providing 'added' and 'expired' callbacks for pose trackers.

    Callbacks are copied under the lock and called outside it, so a callback
    may register or remove callbacks. Exceptions from one callback are
    printed and do not prevent the others from running.

    Usage:
        class MyRegistry(TrackerCallbackMixin):
            def __init__(self):
                super().__init__()

            def add(self, tracker: PoseTracker):
                # Store tracker...
                self._notify_added(tracker)
    """

    def __init__(self):
        self._added_callbacks: set[PoseTrackerCallback] = set()
        self._expired_callbacks: set[PoseTrackerCallback] = set()
        self._callback_lock = Lock()

    def _emit(self, callbacks: set[PoseTrackerCallback], tracker: PoseTracker) -> None:
        with self._callback_lock:
            callbacks_copy = list(callbacks)

        for callback in callbacks_copy:
            try:
                callback(tracker)
            except Exception as e:
                print(f"{self.__class__.__name__}: Error in callback for {tracker.guid}: {e}")
                print_exc()

    def _notify_added(self, tracker: PoseTracker) -> None:
        self._emit(self._added_callbacks, tracker)

    def _notify_expired(self, tracker: PoseTracker) -> None:
        self._emit(self._expired_callbacks, tracker)

    # ADDED
    def add_added_callback(self, callback: PoseTrackerCallback) -> None:
        """Register callback for newly tracked bodies.

        Args:
            callback: Function to call with the new PoseTracker.
        """
        with self._callback_lock:
            self._added_callbacks.add(callback)

    def remove_added_callback(self, callback: PoseTrackerCallback) -> None:
        """Unregister added callback. Safe to call even if not registered."""
        with self._callback_lock:
            self._added_callbacks.discard(callback)

    # EXPIRED
    def add_expired_callback(self, callback: PoseTrackerCallback) -> None:
        """Register callback for evicted bodies.

        Args:
            callback: Function to call with the removed PoseTracker.
        """
        with self._callback_lock:
            self._expired_callbacks.add(callback)

    def remove_expired_callback(self, callback: PoseTrackerCallback) -> None:
        """Unregister expired callback. Safe to call even if not registered."""
        with self._callback_lock:
            self._expired_callbacks.discard(callback)
