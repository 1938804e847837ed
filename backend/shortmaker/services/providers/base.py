"""
Base classes for generative providers

Defines the abstract interfaces the pipeline stages call. Implementations
must translate every vendor error into the ``ProviderError`` hierarchy
(``shortmaker.core.exceptions``) before it leaves the adapter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from shortmaker.models.manifest import CaptionSettings, Manifest

# Fire-and-forget checkpoint hook
PersistHook = Callable[[Manifest], None]


@dataclass
class ImageRequest:
    """One image generation call"""
    prompt: str
    model_id: str
    aspect_ratio: str
    width: Optional[int] = None  # set only for backends that need pixel sizes
    height: Optional[int] = None
    seed: Optional[int] = None
    reference_image_url: Optional[str] = None


@dataclass
class RenderScene:
    """Image + caption pair handed to the renderer"""
    image_url: str
    caption_text: str = ""
    duration_ms: Optional[int] = None


@dataclass
class TextGenerationConfig:
    """Configuration for a text request"""
    model: Optional[str] = None
    temperature: float = 0.3
    max_output_tokens: Optional[int] = None
    extra_options: Dict[str, Any] = field(default_factory=dict)


class TextProvider(ABC):
    """Produces raw text (expected to be JSON) from a prompt."""

    name: str = "text"

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        schema_hint: Optional[Dict[str, Any]] = None,
        config: Optional[TextGenerationConfig] = None,
    ) -> str:
        """Generate text for a prompt

        Args:
            prompt: User prompt
            system_instruction: Optional system prompt
            schema_hint: JSON-schema-like description of the expected output
            config: Sampling configuration

        Returns:
            The raw response text (may be empty)
        """
        pass


class ImageProvider(ABC):
    name: str = "image"

    @abstractmethod
    async def generate_image(self, request: ImageRequest) -> str:
        """Return an image handle (URL or data URI)."""
        pass


class SpeechProvider(ABC):
    name: str = "speech"

    @abstractmethod
    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        """Return a WAV blob wrapping 24 kHz mono 16-bit PCM."""
        pass


class RenderProvider(ABC):
    """Renders still scenes into video and stitches videos together."""

    name: str = "render"

    @abstractmethod
    async def render_scenes(
        self,
        scenes: List[RenderScene],
        width: int,
        height: int,
        audio_url: Optional[str] = None,
        scene_duration_ms: Optional[int] = None,
        background_music_url: Optional[str] = None,
        caption_settings: Optional[CaptionSettings] = None,
    ) -> str:
        """Render scenes in order and return a video handle."""
        pass

    @abstractmethod
    async def concatenate_videos(
        self,
        handles: List[str],
        width: int,
        height: int,
        audio_url: Optional[str] = None,
    ) -> str:
        """Join videos in order, optionally replacing the audio track."""
        pass


__all__ = [
    "PersistHook",
    "ImageRequest",
    "RenderScene",
    "TextGenerationConfig",
    "TextProvider",
    "ImageProvider",
    "SpeechProvider",
    "RenderProvider",
]
