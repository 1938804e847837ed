"""
Pydantic models for the production manifest

The manifest is the unit of work passed between pipeline stages. Field names
are snake_case in Python; provider JSON may use either snake_case or the
camelCase form (``sceneNumber``, ``imagePrompt`` ...), both are accepted.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config.constants import DEFAULT_FPS, DEFAULT_SCENE_DURATION_SECONDS, DEFAULT_VIDEO_RESOLUTION
from .status import ManifestStatus


class _ManifestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class VoiceInstruction(_ManifestModel):
    """Advisory metadata for speech synthesis"""
    voice: Optional[str] = None
    lang: str = "en"
    tone: Optional[str] = None


class CaptionSettings(_ManifestModel):
    """How narration captions are burned into the video"""
    enabled: bool = True
    style: str = "boxed"  # "boxed" or "plain"
    font_scale: float = 0.05  # fraction of output height
    position: float = 0.85  # vertical centre, fraction of output height


class OutputSettings(_ManifestModel):
    video_resolution: str = DEFAULT_VIDEO_RESOLUTION  # "WxH"
    fps: int = DEFAULT_FPS
    scene_duration_default: float = DEFAULT_SCENE_DURATION_SECONDS
    caption_style: Optional[CaptionSettings] = None


class Timecodes(_ManifestModel):
    start_second: float = 0.0
    end_second: float = 0.0

    @field_validator("start_second", "end_second", mode="before")
    @classmethod
    def _coerce_seconds(cls, value):
        return 0.0 if value is None else value


class Scene(_ManifestModel):
    """One narrative beat"""
    scene_number: int = 0
    duration_seconds: float = DEFAULT_SCENE_DURATION_SECONDS
    narration_text: str = ""
    visual_description: str = ""
    character_tokens: List[str] = Field(default_factory=list)
    environment_tokens: List[str] = Field(default_factory=list)
    camera_directive: str = ""
    image_prompt: str = ""
    transition_to_next: str = ""
    timecodes: Optional[Timecodes] = None
    generated_image_url: Optional[str] = None
    generated_image_seed: Optional[int] = None

    @field_validator("character_tokens", "environment_tokens", mode="before")
    @classmethod
    def _coerce_tokens(cls, value):
        # Providers occasionally return a comma-separated string
        if value is None:
            return []
        if isinstance(value, str):
            return [token.strip() for token in value.split(",") if token.strip()]
        return [str(token).strip() for token in value if str(token).strip()]

    @field_validator("scene_number", "duration_seconds", mode="before")
    @classmethod
    def _default_number(cls, value, info):
        if value is None:
            return 0 if info.field_name == "scene_number" else DEFAULT_SCENE_DURATION_SECONDS
        return value

    @field_validator("narration_text", "visual_description", "image_prompt",
                     "camera_directive", "transition_to_next", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return "" if value is None else str(value)


_NULL_DEFAULTS = {"voice_instruction": VoiceInstruction, "output_settings": OutputSettings}


class Manifest(_ManifestModel):
    """Structured description of one generation job"""
    project_id: Optional[str] = None
    idea_input: Optional[str] = None
    seed: Optional[str] = None
    title: str = ""
    final_caption: str = ""
    voice_instruction: VoiceInstruction = Field(default_factory=VoiceInstruction)
    output_settings: OutputSettings = Field(default_factory=OutputSettings)
    scenes: List[Scene] = Field(default_factory=list)
    generated_audio_url: Optional[str] = None
    generated_video_url: Optional[str] = None
    # Mirror of the live job status, stamped by the job state broadcaster
    status: ManifestStatus = ManifestStatus.CREATED

    @property
    def scene_count(self) -> int:
        return len(self.scenes)

    @field_validator("voice_instruction", "output_settings", mode="before")
    @classmethod
    def _default_when_null(cls, value, info):
        # Advisory blocks; a null must not sink an otherwise valid script
        if value is None:
            return _NULL_DEFAULTS[info.field_name]()
        return value

    @field_validator("scenes", mode="before")
    @classmethod
    def _coerce_scenes(cls, value):
        return [] if value is None else value

    @field_validator("title", "final_caption", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return "" if value is None else str(value)


__all__ = [
    "VoiceInstruction",
    "CaptionSettings",
    "OutputSettings",
    "Timecodes",
    "Scene",
    "Manifest",
]
