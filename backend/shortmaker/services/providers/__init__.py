"""
Generative provider contracts and adapters

- base: abstract Text / Image / Speech / Render providers
- gemini_provider: google-genai adapters
- pollinations_provider: Flux images over HTTP
- ffmpeg_renderer: local ffmpeg rendering and concatenation
"""

from .base import (
    PersistHook,
    ImageRequest,
    RenderScene,
    TextGenerationConfig,
    TextProvider,
    ImageProvider,
    SpeechProvider,
    RenderProvider,
)
from .gemini_provider import (
    GEMINI_VOICES,
    GeminiTextProvider,
    GeminiImageProvider,
    GeminiSpeechProvider,
)
from .pollinations_provider import PollinationsImageProvider
from .ffmpeg_renderer import FFmpegRenderProvider
from .factory import ProviderSet, build_default_providers

__all__ = [
    "PersistHook",
    "ImageRequest",
    "RenderScene",
    "TextGenerationConfig",
    "TextProvider",
    "ImageProvider",
    "SpeechProvider",
    "RenderProvider",
    "GEMINI_VOICES",
    "GeminiTextProvider",
    "GeminiImageProvider",
    "GeminiSpeechProvider",
    "PollinationsImageProvider",
    "FFmpegRenderProvider",
    "ProviderSet",
    "build_default_providers",
]
