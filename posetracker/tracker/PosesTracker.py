"""Registry of tracked bodies from one or more senders, with expiry."""

# Standard library imports
from dataclasses import dataclass
from threading import Lock, RLock
from traceback import print_exc
from typing import Callable, Iterator
import time

# Local application imports
from posetracker.ConfigBase import ConfigBase, config_field
from posetracker.pose.Pose import Pose, PoseId
from posetracker.tracker.Guid import make_guid, pose_id_key
from posetracker.tracker.PoseTracker import PoseTracker
from posetracker.tracker.callback import TrackerCallbackMixin
from posetracker.utils.RepeatingTimer import RepeatingTimer


@dataclass
class PosesTrackerConfig(ConfigBase):
    """Configuration for PosesTracker, locked after construction."""

    max_age_ms: float =         config_field(10000.0, min=0.0, fixed=True, description="Evict a body not seen for this many milliseconds")
    reset_after_samples: int =  config_field(0, min=0, fixed=True, description="Reserved, passed to each PoseTracker")
    sample_limit: int =         config_field(100, min=0, fixed=True, description="Poses kept per body when storing intermediate poses, 0 is unlimited")
    store_intermediate: bool =  config_field(False, fixed=True, description="Keep a history of poses per body instead of only the latest")
    expire_interval: float =    config_field(1.0, min=0.01, max=60.0, fixed=True, description="Seconds between expiry scans")


class PosesTracker(TrackerCallbackMixin):
    """Tracks several bodies, keyed by guid ('sender-poseid').

    Callbacks:
    - added: a new guid was seen, called synchronously from seen()
    - expired: a body was not seen for max_age_ms, called from the expiry scan

    All enumerations take a snapshot when called and iterate over that copy,
    so changes made while iterating are not reflected.

    Example:
        >>> tracker = PosesTracker(PosesTrackerConfig(max_age_ms=2000))
        >>> tracker.add_expired_callback(lambda t: print(f"Lost {t.guid}"))
        >>> tracker.start()
        >>> guid = tracker.seen("cam1", pose)
        >>> # Later...
        >>> tracker.stop()
    """

    def __init__(self, config: PosesTrackerConfig | None = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__()

        self.config: PosesTrackerConfig = config or PosesTrackerConfig()
        self._clock: Callable[[], float] = clock

        self._trackers: dict[str, PoseTracker] = {}
        self._lock = Lock()
        # Orders added before expired for the same body, held while those callbacks run
        self._notify_lock = RLock()

        self._timer: RepeatingTimer | None = None
        self._timer_lock = Lock()

    # LIFECYCLE
    def start(self) -> None:
        """Start the periodic expiry scan. Does nothing if already running."""
        with self._timer_lock:
            if self._timer is not None and self._timer.is_alive():
                return
            self._timer = RepeatingTimer(self.config.expire_interval, self._expire_tick, name="PosesTrackerExpiry")
            self._timer.start()

    def stop(self) -> None:
        """Stop the periodic expiry scan. Registered callbacks are kept."""
        with self._timer_lock:
            timer: RepeatingTimer | None = self._timer
            self._timer = None
        if timer is not None:
            timer.stop()

    @property
    def is_running(self) -> bool:
        timer: RepeatingTimer | None = self._timer
        return timer is not None and timer.is_alive()

    def __enter__(self) -> 'PosesTracker':
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()

    # INPUT
    def seen(self, from_id: str, pose: Pose) -> str:
        """Track a pose from a sender.

        Calls the added callbacks if this is a new body.

        Returns:
            The globally-unique id of the body ('from_id-pose_id').

        Raises:
            ValueError: If from_id or pose is None.
        """
        if from_id is None:
            raise ValueError("PosesTracker: parameter 'from_id' is None")
        if pose is None:
            raise ValueError("PosesTracker: parameter 'pose' is None")

        pose_id: str = pose_id_key(pose.id)
        guid: str = make_guid(str(from_id), pose_id)

        added: PoseTracker | None = None
        with self._notify_lock:
            with self._lock:
                tracker: PoseTracker | None = self._trackers.get(guid)
                if tracker is None:
                    tracker = PoseTracker(
                        str(from_id), pose_id,
                        sample_limit=self.config.sample_limit,
                        store_intermediate=self.config.store_intermediate,
                        reset_after_samples=self.config.reset_after_samples,
                        clock=self._clock,
                    )
                    tracker.seen(pose)
                    self._trackers[guid] = tracker
                    added = tracker
                else:
                    tracker.seen(pose)

            if added is not None:
                self._notify_added(added)
        return guid

    # EXPIRY
    def remove_expired(self) -> list[PoseTracker]:
        """Remove bodies not seen for more than max_age_ms.

        Calls the expired callbacks once per removed body, oldest first.

        Returns:
            The removed trackers.
        """
        max_age_ms: float = self.config.max_age_ms
        with self._notify_lock:
            with self._lock:
                aged: list[tuple[float, PoseTracker]] = [(t.elapsed, t) for t in self._trackers.values()]
                expired: list[PoseTracker] = [t for elapsed, t in sorted(aged, key=lambda e: e[0], reverse=True) if elapsed > max_age_ms]
                for tracker in expired:
                    del self._trackers[tracker.guid]

            for tracker in expired:
                self._notify_expired(tracker)
        return expired

    def _expire_tick(self) -> None:
        try:
            self.remove_expired()
        except Exception as e:
            print(f"PosesTracker: Error during expiry scan: {e}")
            print_exc()

    def clear(self) -> None:
        """Remove all bodies without calling any callbacks."""
        with self._lock:
            self._trackers.clear()

    # ENUMERATION
    def _snapshot(self) -> list[PoseTracker]:
        with self._lock:
            return list(self._trackers.values())

    def get_trackers_by_age(self) -> Iterator[PoseTracker]:
        """Trackers ordered by elapsed time, most recently seen first."""
        trackers: list[PoseTracker] = self._snapshot()
        trackers.sort(key=lambda t: t.elapsed)
        return iter(trackers)

    def get_trackers(self) -> Iterator[PoseTracker]:
        return iter(self._snapshot())

    def get_values_by_age(self) -> Iterator[Pose]:
        """Last pose of each tracker, most recently seen first."""
        return (tracker.last for tracker in self.get_trackers_by_age())

    def get_values(self) -> Iterator[Pose]:
        return (tracker.last for tracker in self._snapshot())

    def get_from_sender(self, sender_id: str) -> Iterator[PoseTracker]:
        """Trackers of all bodies originating from one sender."""
        key: str = str(sender_id)
        return iter([t for t in self._snapshot() if t.from_id == key])

    def get_sender_ids(self) -> Iterator[str]:
        """Unique sender ids, in the order they were first tracked."""
        return iter(dict.fromkeys(t.from_id for t in self._snapshot()))

    def get_guids(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._trackers.keys()))

    # LOOKUP
    def get_tracker_by_pose_id(self, pose_id: PoseId) -> PoseTracker | None:
        """First tracker with this detector-local pose id.

        Warning: pose ids are not unique when there are multiple senders,
        prefer get_tracker_by_guid().
        """
        key: str = pose_id_key(pose_id)
        for tracker in self._snapshot():
            if tracker.pose_id == key:
                return tracker
        return None

    def get_value_by_pose_id(self, pose_id: PoseId) -> Pose | None:
        """Last pose of the first tracker with this pose id, see get_tracker_by_pose_id()."""
        tracker: PoseTracker | None = self.get_tracker_by_pose_id(pose_id)
        return tracker.last if tracker is not None else None

    def get_tracker_by_guid(self, guid: str) -> PoseTracker | None:
        with self._lock:
            return self._trackers.get(guid)

    def get_value_by_guid(self, guid: str) -> Pose | None:
        tracker: PoseTracker | None = self.get_tracker_by_guid(guid)
        return tracker.last if tracker is not None else None

    @property
    def size(self) -> int:
        """Number of tracked bodies."""
        with self._lock:
            return len(self._trackers)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, guid: object) -> bool:
        with self._lock:
            return guid in self._trackers
