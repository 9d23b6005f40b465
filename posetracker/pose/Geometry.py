"""Geometry derived from the keypoints of a single pose."""

from dataclasses import dataclass

from posetracker.pose.Keypoints import KeypointKey, KeypointLandmark
from posetracker.pose.Pose import Pose
from posetracker.utils.PointsAndRects import Point2f


@dataclass(frozen=True)
class Line:
    a: Point2f
    b: Point2f

    def interpolate(self, t: float) -> Point2f:
        """Point at t along the line, 0.0 is a and 1.0 is b."""
        return self.a.lerp(self.b, t)

    @property
    def midpoint(self) -> Point2f:
        return self.interpolate(0.5)


def line_between(pose: Pose, a: KeypointKey, b: KeypointKey) -> Line | None:
    """Line between two named keypoints, or None if either is missing."""
    pt_a = pose.get_keypoint(a)
    pt_b = pose.get_keypoint(b)
    if pt_a is None or pt_b is None:
        return None
    return Line(pt_a, pt_b)


def rough_center(pose: Pose) -> Point2f | None:
    """Approximate torso center from the two shoulder-to-hip diagonals.

    Returns the average of both diagonal midpoints, or None if any of the
    four keypoints is missing.
    """
    diagonal_a = line_between(pose, KeypointLandmark.left_shoulder, KeypointLandmark.right_hip)
    diagonal_b = line_between(pose, KeypointLandmark.right_shoulder, KeypointLandmark.left_hip)
    if diagonal_a is None or diagonal_b is None:
        return None

    total = diagonal_a.midpoint + diagonal_b.midpoint
    return total / 2
