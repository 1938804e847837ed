"""
Model Configuration for Pipeline Steps

Every generative model used by the pipeline is declared here so the stages
never compare model strings themselves.

=== IMAGE BACKENDS ===

Image synthesis supports a closed set of backends. Each backend maps to a
request shape through ``IMAGE_BACKENDS``:

    - nano_banana : Gemini 2.5 Flash Image, symbolic aspect ratio
    - gemini_pro  : Gemini 3 Pro Image, symbolic aspect ratio
    - flux        : Pollinations Flux, explicit pixel dimensions
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ImageProviderKind(str, Enum):
    """Services that can fulfil an image request"""
    GEMINI = "gemini"
    POLLINATIONS = "pollinations"


class ImageBackend(str, Enum):
    """Supported image backends (user-facing selector)"""
    NANO_BANANA = "nano_banana"
    GEMINI_PRO = "gemini_pro"
    FLUX = "flux"


@dataclass(frozen=True)
class ImageBackendSpec:
    """Request shape for one image backend"""
    model_id: str
    provider: ImageProviderKind
    requires_dimensions: bool = False
    description: str = ""


IMAGE_BACKENDS: Dict[ImageBackend, ImageBackendSpec] = {
    ImageBackend.NANO_BANANA: ImageBackendSpec(
        model_id="gemini-2.5-flash-image",
        provider=ImageProviderKind.GEMINI,
        description="Fast Gemini image model",
    ),
    ImageBackend.GEMINI_PRO: ImageBackendSpec(
        model_id="gemini-3-pro-image-preview",
        provider=ImageProviderKind.GEMINI,
        description="High quality Gemini image model",
    ),
    ImageBackend.FLUX: ImageBackendSpec(
        model_id="flux",
        provider=ImageProviderKind.POLLINATIONS,
        requires_dimensions=True,
        description="Pollinations Flux, needs explicit width/height",
    ),
}

DEFAULT_IMAGE_BACKEND = ImageBackend.NANO_BANANA


def get_image_backend_spec(backend: ImageBackend) -> ImageBackendSpec:
    """Look up the request shape for a backend (accepts enum or its value)."""
    return IMAGE_BACKENDS[ImageBackend(backend)]


@dataclass
class PipelineModels:
    """Text and speech models used by the pipeline"""
    script_generation: str = "gemini-2.5-flash"
    speech_synthesis: str = "gemini-2.5-flash-preview-tts"


DEFAULT_PIPELINE_MODELS = PipelineModels(
    script_generation=os.getenv("SCRIPT_MODEL", "gemini-2.5-flash"),
    speech_synthesis=os.getenv("TTS_MODEL", "gemini-2.5-flash-preview-tts"),
)


__all__ = [
    "ImageProviderKind",
    "ImageBackend",
    "ImageBackendSpec",
    "IMAGE_BACKENDS",
    "DEFAULT_IMAGE_BACKEND",
    "get_image_backend_spec",
    "PipelineModels",
    "DEFAULT_PIPELINE_MODELS",
]
