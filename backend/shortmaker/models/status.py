"""
Job status constants and enumerations.

The live pipeline status lives on the Job State (``JobStatus``). The manifest
carries a ``ManifestStatus`` that is only ever a mirror of it.
"""

from enum import Enum


class JobStatus(Enum):
    """Enumeration of all possible pipeline run statuses."""

    CREATED = "created"
    GENERATING_SCRIPT = "generating_script"
    STORY_READY = "story_ready"
    IMAGES_PROCESSING = "images_processing"
    AUDIO_PROCESSING = "audio_processing"
    ASSEMBLING = "assembling"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """Check if this status is a terminal state (no further progress)."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class ManifestStatus(str, Enum):
    """Status values stored on the manifest itself."""

    CREATED = "created"
    STORY_READY = "story_ready"
    IMAGES_PROCESSING = "images_processing"
    AUDIO_PROCESSING = "audio_processing"
    ASSEMBLING = "assembling"
    COMPLETED = "completed"
    FAILED = "failed"


# Script generation has no manifest-level counterpart
JOB_TO_MANIFEST_STATUS = {
    JobStatus.CREATED: ManifestStatus.CREATED,
    JobStatus.GENERATING_SCRIPT: ManifestStatus.CREATED,
    JobStatus.STORY_READY: ManifestStatus.STORY_READY,
    JobStatus.IMAGES_PROCESSING: ManifestStatus.IMAGES_PROCESSING,
    JobStatus.AUDIO_PROCESSING: ManifestStatus.AUDIO_PROCESSING,
    JobStatus.ASSEMBLING: ManifestStatus.ASSEMBLING,
    JobStatus.COMPLETED: ManifestStatus.COMPLETED,
    JobStatus.FAILED: ManifestStatus.FAILED,
}


def manifest_status_for(status: JobStatus) -> ManifestStatus:
    """
    Convert a job status to the value mirrored onto the manifest.

    Args:
        status: The live job status

    Returns:
        The corresponding manifest status
    """
    return JOB_TO_MANIFEST_STATUS[status]


__all__ = [
    "JobStatus",
    "ManifestStatus",
    "JOB_TO_MANIFEST_STATUS",
    "manifest_status_for",
]
