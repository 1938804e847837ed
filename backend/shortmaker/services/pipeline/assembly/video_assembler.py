"""
Video Assembler

Turns a manifest with per-scene images (and optionally a combined narration
track) into the final video.

Up to ``chunk_size`` usable scenes are rendered in one pass with narration
and background music. Longer manifests are rendered as silent fixed-size
chunks at a fixed per-scene duration, concatenated, and the narration is
laid over the concatenated result. Narration is not split per chunk, so
audio/scene alignment in chunked mode is approximate. Background music is
only applied in single-pass mode.
"""

import re
from typing import List, Optional, Tuple

from shortmaker.config.constants import (
    DEFAULT_SCENE_DURATION_MS,
    DEFAULT_VIDEO_RESOLUTION,
    VIDEO_CHUNK_SIZE,
)
from shortmaker.core import FatalProviderError, VideoAssemblyError, get_logger, is_placeholder_image
from shortmaker.models.manifest import CaptionSettings, Manifest, Scene
from shortmaker.services.infrastructure.orchestration.job_state import JobStateBroadcaster
from shortmaker.services.providers.base import RenderProvider, RenderScene

logger = get_logger(__name__, component="video_assembler")

_RESOLUTION_RE = re.compile(r"^\s*(\d{2,5})\s*[xX×]\s*(\d{2,5})\s*$")


def parse_resolution(value: Optional[str]) -> Tuple[int, int]:
    """``"WxH"`` to ``(width, height)``, falling back to the default resolution."""
    for candidate in (value, DEFAULT_VIDEO_RESOLUTION):
        match = _RESOLUTION_RE.match(candidate or "")
        if match:
            width, height = int(match.group(1)), int(match.group(2))
            if width > 0 and height > 0:
                return width, height
    raise ValueError(f"Invalid default resolution {DEFAULT_VIDEO_RESOLUTION!r}")


def usable_scenes(manifest: Manifest) -> List[Scene]:
    """Scenes with a real generated image, in manifest order."""
    return [scene for scene in manifest.scenes if not is_placeholder_image(scene.generated_image_url)]


def chunk_scenes(scenes: List[RenderScene], size: int) -> List[List[RenderScene]]:
    return [scenes[i:i + size] for i in range(0, len(scenes), size)]


class VideoAssembler:
    """Renders the final video through a ``RenderProvider``."""

    def __init__(
        self,
        renderer: RenderProvider,
        job_state: Optional[JobStateBroadcaster] = None,
        chunk_size: int = VIDEO_CHUNK_SIZE,
        chunk_scene_duration_ms: int = DEFAULT_SCENE_DURATION_MS,
    ):
        self.renderer = renderer
        self.job_state = job_state
        self.chunk_size = max(1, chunk_size)
        self.chunk_scene_duration_ms = chunk_scene_duration_ms

    def _log(self, line: str) -> None:
        if self.job_state is not None:
            self.job_state.add_log(line)
        else:
            logger.info(line)

    async def assemble(self, manifest: Manifest, background_music_url: Optional[str] = None) -> str:
        """
        Render ``manifest`` into one video.

        Args:
            manifest: Manifest with generated images (and optionally audio)
            background_music_url: Optional music handle (single-pass only)

        Returns:
            Final video handle

        Raises:
            VideoAssemblyError: No usable scenes, or a render / join step failed
            FatalProviderError: Renderer reported a configuration problem
        """
        scenes = usable_scenes(manifest)
        if not scenes:
            raise VideoAssemblyError("No images generated to assemble video")

        dropped = len(manifest.scenes) - len(scenes)
        if dropped:
            logger.info(f"Skipping {dropped} scenes without a generated image")

        width, height = parse_resolution(manifest.output_settings.video_resolution)
        captions = manifest.output_settings.caption_style or CaptionSettings()
        render_scenes = [
            RenderScene(image_url=scene.generated_image_url, caption_text=scene.narration_text)
            for scene in scenes
        ]

        if len(render_scenes) <= self.chunk_size:
            return await self._render_single(render_scenes, width, height, manifest, captions, background_music_url)
        return await self._render_chunked(render_scenes, width, height, manifest, captions, background_music_url)

    async def _render_single(
        self,
        scenes: List[RenderScene],
        width: int,
        height: int,
        manifest: Manifest,
        captions: CaptionSettings,
        background_music_url: Optional[str],
    ) -> str:
        self._log(f"🎬 Rendering {len(scenes)} scenes at {width}x{height}")
        try:
            return await self.renderer.render_scenes(
                scenes,
                width,
                height,
                audio_url=manifest.generated_audio_url,
                background_music_url=background_music_url,
                caption_settings=captions,
            )
        except FatalProviderError:
            raise
        except Exception as exc:
            raise VideoAssemblyError(f"Render failed: {exc}. Please try again.") from exc

    async def _render_chunked(
        self,
        scenes: List[RenderScene],
        width: int,
        height: int,
        manifest: Manifest,
        captions: CaptionSettings,
        background_music_url: Optional[str],
    ) -> str:
        chunks = chunk_scenes(scenes, self.chunk_size)
        if background_music_url:
            logger.warning("Background music is not applied to chunked renders")

        self._log(f"🎞️ Long video: rendering {len(scenes)} scenes in {len(chunks)} parts")
        handles: List[str] = []
        for index, chunk in enumerate(chunks):
            self._log(f"🎞️ Rendering part {index + 1}/{len(chunks)} ({len(chunk)} scenes)")
            try:
                handle = await self.renderer.render_scenes(
                    chunk,
                    width,
                    height,
                    audio_url=None,
                    scene_duration_ms=self.chunk_scene_duration_ms,
                    caption_settings=captions,
                )
            except FatalProviderError:
                raise
            except Exception as exc:
                raise VideoAssemblyError(
                    f"Render failed at minute {index + 1}. Please try again.",
                    chunk_index=index,
                ) from exc
            handles.append(handle)

        self._log(f"🔗 Joining {len(handles)} parts")
        try:
            return await self.renderer.concatenate_videos(
                handles,
                width,
                height,
                audio_url=manifest.generated_audio_url,
            )
        except FatalProviderError:
            raise
        except Exception as exc:
            raise VideoAssemblyError(f"Failed to join video parts: {exc}") from exc


__all__ = ["VideoAssembler", "parse_resolution", "usable_scenes", "chunk_scenes"]
