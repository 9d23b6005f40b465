"""Pose data: keypoints, poses and keypoint geometry."""

from .Keypoints import  Keypoints, KeypointLandmark, KEYPOINT_NAMES, KEYPOINT_COUNT
from .Pose import       Pose, PoseId
from .Geometry import   Line, line_between, rough_center
