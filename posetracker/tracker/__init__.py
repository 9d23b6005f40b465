"""Trackers for bodies seen by one or more pose senders."""

from .Guid import           make_guid, split_guid, GUID_SEPARATOR
from .PoseTracker import    PoseTracker, PoseTrackerCallback
from .PosesTracker import   PosesTracker, PosesTrackerConfig
