"""State of a single tracked body."""

from collections import deque
import time
from typing import Callable

from posetracker.pose.Pose import Pose
from posetracker.tracker.Guid import make_guid


class PoseTracker:
    """Tracks one body from one sender.

    Identity (from_id, pose_id, guid) is fixed at creation. Every call to
    seen() replaces `last` and resets `elapsed`. With store_intermediate the
    most recent `sample_limit` poses are kept in `history`, otherwise only
    the latest one.
    """

    def __init__(self, from_id: str, pose_id: str,
                 sample_limit: int = 100,
                 store_intermediate: bool = False,
                 reset_after_samples: int = 0,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._from_id: str = from_id
        self._pose_id: str = pose_id
        self._guid: str = make_guid(from_id, pose_id)

        self._sample_limit: int = sample_limit
        self._store_intermediate: bool = store_intermediate
        # Accepted for config pass-through, no behaviour attached
        self._reset_after_samples: int = reset_after_samples

        self._clock: Callable[[], float] = clock
        self._created_at: float = clock()
        self._last_seen: float = self._created_at

        maxlen: int | None = None
        if not store_intermediate:
            maxlen = 1
        elif sample_limit > 0:
            maxlen = sample_limit
        self._history: deque[Pose] = deque(maxlen=maxlen)
        self._initial: Pose | None = None
        self._sample_count: int = 0

    def seen(self, pose: Pose) -> None:
        """Record a new observation of this body."""
        if pose is None:
            raise ValueError(f"PoseTracker {self._guid}: pose is None")

        if self._initial is None:
            self._initial = pose
        self._history.append(pose)
        self._sample_count += 1
        self._last_seen = self._clock()

    # IDENTITY
    @property
    def from_id(self) -> str:
        return self._from_id

    @property
    def pose_id(self) -> str:
        return self._pose_id

    @property
    def guid(self) -> str:
        return self._guid

    # DATA
    @property
    def last(self) -> Pose | None:
        """Most recently seen pose."""
        return self._history[-1] if self._history else None

    @property
    def initial(self) -> Pose | None:
        """First pose seen."""
        return self._initial

    @property
    def history(self) -> tuple[Pose, ...]:
        """Retained poses, oldest first."""
        return tuple(self._history)

    @property
    def sample_count(self) -> int:
        return self._sample_count

    # TIMING
    @property
    def elapsed(self) -> float:
        """Milliseconds since the last call to seen()."""
        return (self._clock() - self._last_seen) * 1000.0

    @property
    def age(self) -> float:
        """Milliseconds since this tracker was created."""
        return (self._clock() - self._created_at) * 1000.0

    # OPTIONS
    @property
    def sample_limit(self) -> int:
        return self._sample_limit

    @property
    def store_intermediate(self) -> bool:
        return self._store_intermediate

    @property
    def reset_after_samples(self) -> int:
        return self._reset_after_samples

    def __repr__(self) -> str:
        return f"PoseTracker(guid={self._guid}, samples={self._sample_count}, elapsed={self.elapsed:.0f}ms)"


PoseTrackerCallback = Callable[[PoseTracker], None]
