"""
Scene Image Synthesizer

Builds the enriched prompt for one scene, maps the selected backend to its
request shape and calls the matching image provider. Per-scene seeds are
derived deterministically from the global seed so re-running with the same
seed reproduces the same image request.
"""

import zlib
from typing import Mapping, Optional, Union

from shortmaker.config import (
    DEFAULT_IMAGE_BACKEND,
    ImageBackend,
    ImageProviderKind,
    get_image_backend_spec,
)
from shortmaker.config.constants import IMAGE_CALL_TIMEOUT, IMAGE_DIMENSIONS
from shortmaker.core import (
    ConfigurationError,
    FatalProviderError,
    get_logger,
    with_timeout,
)
from shortmaker.models.generation import AspectRatio
from shortmaker.models.manifest import Scene
from shortmaker.services.providers.base import ImageProvider, ImageRequest

from .prompts import build_image_prompt

logger = get_logger(__name__, component="image_synthesizer")


def derive_scene_seed(global_seed: Optional[str], scene_number: int) -> int:
    """Stable 31-bit seed for one scene."""
    return zlib.crc32(f"{global_seed or ''}:{scene_number}".encode("utf-8")) & 0x7FFFFFFF


class SceneImageSynthesizer:
    """Generates one image per call; retries are the caller's decision."""

    def __init__(
        self,
        providers: Mapping[ImageProviderKind, ImageProvider],
        call_timeout: float = IMAGE_CALL_TIMEOUT,
        reference_image_url: Optional[str] = None,
    ):
        self.providers = dict(providers)
        self.call_timeout = call_timeout
        self.reference_image_url = reference_image_url

    def build_request(
        self,
        scene: Scene,
        global_seed: Optional[str],
        style_tone: Optional[str] = None,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.PORTRAIT,
        backend: Union[ImageBackend, str] = DEFAULT_IMAGE_BACKEND,
    ) -> ImageRequest:
        """Pure request construction (prompt, seed, geometry)."""
        spec = get_image_backend_spec(backend)
        ratio = AspectRatio(aspect_ratio).value
        width = height = None
        if spec.requires_dimensions:
            width, height = IMAGE_DIMENSIONS.get(ratio, IMAGE_DIMENSIONS[AspectRatio.PORTRAIT.value])

        return ImageRequest(
            prompt=build_image_prompt(scene, style_tone),
            model_id=spec.model_id,
            aspect_ratio=ratio,
            width=width,
            height=height,
            seed=derive_scene_seed(global_seed, scene.scene_number),
            reference_image_url=self.reference_image_url,
        )

    async def generate(
        self,
        scene: Scene,
        global_seed: Optional[str],
        style_tone: Optional[str] = None,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.PORTRAIT,
        backend: Union[ImageBackend, str] = DEFAULT_IMAGE_BACKEND,
    ) -> str:
        """
        Generate the image for ``scene``.

        Returns:
            Image handle (URL or data URI)

        Raises:
            FatalProviderError: Configuration / quota / permission problems, unchanged
            TransientProviderError: Timeouts and other retryable failures
        """
        request = self.build_request(scene, global_seed, style_tone, aspect_ratio, backend)
        kind = get_image_backend_spec(backend).provider
        provider = self.providers.get(kind)
        if provider is None:
            raise ConfigurationError(f"No image provider configured for '{kind.value}'")

        logger.debug(
            f"Scene {scene.scene_number}: requesting image",
            extra={"backend": ImageBackend(backend).value, "seed": request.seed, "prompt_chars": len(request.prompt)},
        )
        try:
            return await with_timeout(
                provider.generate_image(request),
                self.call_timeout,
                f"Image generation for scene {scene.scene_number}",
                provider=getattr(provider, "name", None),
            )
        except FatalProviderError as exc:
            logger.error(f"Scene {scene.scene_number}: {exc.message}", extra={"error_type": type(exc).__name__})
            raise


__all__ = ["SceneImageSynthesizer", "derive_scene_seed"]
