"""Aggregates per-frame pose detections from one or more senders into expiring per-body trackers."""

from posetracker.pose import Pose, Keypoints, KeypointLandmark, line_between, rough_center
from posetracker.tracker import PoseTracker, PosesTracker, PosesTrackerConfig, make_guid, split_guid
