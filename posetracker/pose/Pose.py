# Standard library imports
from dataclasses import dataclass, field
import time

# Pose imports
from posetracker.pose.Keypoints import Keypoints, KeypointKey
from posetracker.utils.PointsAndRects import Point2f


PoseId = int | str


@dataclass(frozen=True)
class Pose:
    """Immutable detection of one body in one frame.

    `id` is local to the detector that produced it; None is treated as 0.
    """
    id: PoseId | None =     field(default=None)
    keypoints: Keypoints =  field(default_factory=Keypoints.create_empty)
    score: float =          field(default=0.0)
    time_stamp: float =     field(default_factory=time.time)

    def get_keypoint(self, key: KeypointKey) -> Point2f | None:
        return self.keypoints.get_keypoint(key)

    def __repr__(self) -> str:
        return f"Pose(id={self.id}, points={self.keypoints.valid_count})"


