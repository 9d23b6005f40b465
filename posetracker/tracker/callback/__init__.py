"""Callback system for tracker notifications."""

from posetracker.tracker.callback.mixins import TrackerCallbackMixin
