"""
Provider Factory

Builds the default provider set from configuration. A single Gemini client
is shared by the text, image and speech adapters.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from shortmaker.config import ImageProviderKind
from shortmaker.core import get_logger
from shortmaker.services.infrastructure.llm.gemini import create_gemini_client

from .base import ImageProvider, RenderProvider, SpeechProvider, TextProvider
from .ffmpeg_renderer import FFmpegRenderProvider
from .gemini_provider import GeminiImageProvider, GeminiSpeechProvider, GeminiTextProvider
from .pollinations_provider import PollinationsImageProvider

logger = get_logger(__name__, component="provider_factory")


@dataclass
class ProviderSet:
    """Everything the pipeline needs to talk to the outside world"""
    text: TextProvider
    speech: SpeechProvider
    render: RenderProvider
    images: Dict[ImageProviderKind, ImageProvider] = field(default_factory=dict)


def build_default_providers(
    output_dir: Optional[Path] = None,
    client: Any = None,
    api_key: Optional[str] = None,
) -> ProviderSet:
    """Create the Gemini / Pollinations / ffmpeg provider set

    Args:
        output_dir: Where rendered videos are written (defaults to OUTPUT_DIR)
        client: Pre-built google-genai client (mainly for tests)
        api_key: Optional Gemini API key override

    Raises:
        ConfigurationError: If Gemini credentials are missing
    """
    client = client if client is not None else create_gemini_client(api_key=api_key)
    providers = ProviderSet(
        text=GeminiTextProvider(client),
        speech=GeminiSpeechProvider(client),
        render=FFmpegRenderProvider(output_dir=output_dir),
        images={
            ImageProviderKind.GEMINI: GeminiImageProvider(client),
            ImageProviderKind.POLLINATIONS: PollinationsImageProvider(),
        },
    )
    logger.info("Initialized default providers", extra={"image_providers": [k.value for k in providers.images]})
    return providers


__all__ = ["ProviderSet", "build_default_providers"]
