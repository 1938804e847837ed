"""
Data models shared by the pipeline stages
"""

from .status import JobStatus, ManifestStatus, manifest_status_for
from .manifest import (
    VoiceInstruction,
    CaptionSettings,
    OutputSettings,
    Timecodes,
    Scene,
    Manifest,
)
from .generation import (
    DurationTier,
    AspectRatio,
    ProductionMode,
    StoryRequest,
    ProductionPlan,
    scene_count_for_tier,
    resolution_for_aspect_ratio,
    resolve_plan,
)

__all__ = [
    "JobStatus",
    "ManifestStatus",
    "manifest_status_for",
    "VoiceInstruction",
    "CaptionSettings",
    "OutputSettings",
    "Timecodes",
    "Scene",
    "Manifest",
    "DurationTier",
    "AspectRatio",
    "ProductionMode",
    "StoryRequest",
    "ProductionPlan",
    "scene_count_for_tier",
    "resolution_for_aspect_ratio",
    "resolve_plan",
]
