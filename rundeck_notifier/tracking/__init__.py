"""Execution tracking: trigger a job, then poll until it finishes."""

from .models import TrackerState, TrackingResult
from .tracker import DEFAULT_POLL_INTERVAL, ExecutionTracker

__all__ = ["DEFAULT_POLL_INTERVAL", "ExecutionTracker", "TrackerState", "TrackingResult"]
