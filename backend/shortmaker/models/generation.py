"""
Generation request models

``StoryRequest`` is what a caller hands to the script generator.
``resolve_plan`` turns it into the fixed amount of work (scene count,
resolution, aspect ratio) every later stage relies on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..config.constants import (
    ASPECT_RATIO_RESOLUTIONS,
    DEFAULT_SCENE_COUNT,
    DEFAULT_VIDEO_RESOLUTION,
    DURATION_TIER_SCENES,
    MAX_IDEA_CHARS,
)


class DurationTier(str, Enum):
    """Named video length buckets"""
    SECONDS_15 = "15s"
    SECONDS_30 = "30s"
    SECONDS_60 = "60s"
    MINUTES_5 = "5m"
    MINUTES_10 = "10m"
    MINUTES_20 = "20m"


class AspectRatio(str, Enum):
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"
    SQUARE = "1:1"
    CLASSIC = "4:3"


class ProductionMode(str, Enum):
    """Short-form video vs. illustrated storybook"""
    SHORTS = "shorts"
    STORYBOOK = "storybook"


class StoryRequest(BaseModel):
    """Request to write a script from an idea"""
    idea: str = Field(..., min_length=1)
    seed: Optional[str] = None
    reference_image_url: Optional[str] = None
    voice_preference: Optional[str] = None
    style_tone: Optional[str] = None
    script_style: Optional[str] = None
    mode: ProductionMode = ProductionMode.SHORTS
    duration_tier: str = DurationTier.SECONDS_30.value
    aspect_ratio: Optional[AspectRatio] = None

    @field_validator("idea")
    @classmethod
    def _strip_idea(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("idea must not be blank")
        return value

    @field_validator("duration_tier", mode="before")
    @classmethod
    def _tier_value(cls, value):
        return value.value if isinstance(value, DurationTier) else str(value)

    def sanitized_idea(self) -> str:
        """Idea text safe to embed in a quoted prompt."""
        return " ".join(self.idea[:MAX_IDEA_CHARS].split()).replace('"', "'")


@dataclass(frozen=True)
class ProductionPlan:
    """Resolved once per run; stages never re-derive these values."""
    scene_count: int
    aspect_ratio: AspectRatio
    resolution: str


def scene_count_for_tier(tier: Optional[str]) -> int:
    """Target scene count for a duration tier (unknown tiers get the default)."""
    if isinstance(tier, DurationTier):
        tier = tier.value
    return DURATION_TIER_SCENES.get(tier or "", DEFAULT_SCENE_COUNT)


def resolution_for_aspect_ratio(aspect_ratio: Optional[str]) -> str:
    if isinstance(aspect_ratio, AspectRatio):
        aspect_ratio = aspect_ratio.value
    return ASPECT_RATIO_RESOLUTIONS.get(aspect_ratio or "", DEFAULT_VIDEO_RESOLUTION)


def resolve_plan(request: StoryRequest) -> ProductionPlan:
    """
    Resolve scene count, aspect ratio and resolution for a request.

    Storybooks default to landscape, everything else to portrait.
    """
    aspect_ratio = request.aspect_ratio
    if aspect_ratio is None:
        aspect_ratio = (
            AspectRatio.LANDSCAPE if request.mode == ProductionMode.STORYBOOK
            else AspectRatio.PORTRAIT
        )
    return ProductionPlan(
        scene_count=scene_count_for_tier(request.duration_tier),
        aspect_ratio=aspect_ratio,
        resolution=resolution_for_aspect_ratio(aspect_ratio),
    )


__all__ = [
    "DurationTier",
    "AspectRatio",
    "ProductionMode",
    "StoryRequest",
    "ProductionPlan",
    "scene_count_for_tier",
    "resolution_for_aspect_ratio",
    "resolve_plan",
]
