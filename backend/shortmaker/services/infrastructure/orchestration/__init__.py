"""Job orchestration - observable job state."""

from .job_state import JobState, JobStateBroadcaster

__all__ = ["JobState", "JobStateBroadcaster"]
