import pytest

from posetracker.pose.Keypoints import Keypoints
from posetracker.pose.Pose import Pose
from posetracker.tracker.PosesTracker import PosesTracker, PosesTrackerConfig


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 100.0) -> None:
        self.now: float = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_tracker(clock):
    created: list[PosesTracker] = []

    def factory(**config) -> PosesTracker:
        tracker = PosesTracker(PosesTrackerConfig(**config), clock=clock)
        created.append(tracker)
        return tracker

    yield factory

    for tracker in created:
        tracker.stop()


def make_pose(pose_id=None, **points) -> Pose:
    return Pose(id=pose_id, keypoints=Keypoints.from_dict(points))
