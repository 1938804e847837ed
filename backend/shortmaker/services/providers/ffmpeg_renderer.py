"""
FFmpeg render provider

Renders still scenes into a captioned, slowly zooming video and stitches
videos with the concat demuxer. Media handles (URLs, data URIs, paths) are
materialized into a per-render work directory first.
"""

import uuid
from pathlib import Path
from typing import List, Optional

from shortmaker import config
from shortmaker.config.constants import DEFAULT_FPS, DEFAULT_SCENE_DURATION_MS, RENDER_TIMEOUT
from shortmaker.core import InfrastructureError, LogTimer, get_logger, materialize_handle
from shortmaker.models.manifest import CaptionSettings
from shortmaker.services.pipeline.assembly.ffmpeg import (
    build_audio_mux_cmd,
    build_concat_cmd,
    build_still_clip_cmd,
    get_media_duration,
    run_ffmpeg,
    wrap_caption,
    write_concat_list,
)

from .base import RenderProvider, RenderScene

logger = get_logger(__name__, component="ffmpeg_renderer")


class FFmpegRenderProvider(RenderProvider):
    """RenderProvider backed by the local ffmpeg/ffprobe binaries."""

    name = "ffmpeg"

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        fps: int = DEFAULT_FPS,
        timeout: float = RENDER_TIMEOUT,
    ):
        self.output_dir = Path(output_dir) if output_dir else config.OUTPUT_DIR
        self.fps = fps
        self.timeout = timeout

    def _new_work_dir(self, prefix: str) -> Path:
        work_dir = self.output_dir / f"{prefix}_{uuid.uuid4().hex[:8]}"
        work_dir.mkdir(parents=True, exist_ok=True)
        return work_dir

    async def _scene_durations(
        self,
        scenes: List[RenderScene],
        audio_path: Optional[Path],
        scene_duration_ms: Optional[int],
    ) -> List[float]:
        """Seconds per scene: explicit > fixed > narration spread evenly > default."""
        spread: Optional[float] = None
        if scene_duration_ms is None and audio_path is not None:
            audio_duration = await get_media_duration(str(audio_path))
            if audio_duration > 0:
                spread = audio_duration / len(scenes)

        durations = []
        for scene in scenes:
            if scene.duration_ms:
                durations.append(scene.duration_ms / 1000)
            elif scene_duration_ms:
                durations.append(scene_duration_ms / 1000)
            elif spread:
                durations.append(spread)
            else:
                durations.append(DEFAULT_SCENE_DURATION_MS / 1000)
        return durations

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
        if not scenes:
            raise InfrastructureError("No scenes to render")

        caption = caption_settings or CaptionSettings()
        work_dir = self._new_work_dir("render")
        audio_path = (
            await materialize_handle(audio_url, work_dir, "narration", "wav") if audio_url else None
        )
        music_path = (
            await materialize_handle(background_music_url, work_dir, "music", "mp3")
            if background_music_url else None
        )
        durations = await self._scene_durations(scenes, audio_path, scene_duration_ms)
        font_size = max(12, int(height * caption.font_scale))

        with LogTimer(logger, f"render {len(scenes)} scenes at {width}x{height}"):
            clip_paths: List[str] = []
            for index, (scene, duration) in enumerate(zip(scenes, durations), start=1):
                image_path = await materialize_handle(scene.image_url, work_dir, f"scene_{index:03d}", "png")
                caption_file = None
                if caption.enabled and scene.caption_text.strip():
                    caption_file = work_dir / f"caption_{index:03d}.txt"
                    caption_file.write_text(wrap_caption(scene.caption_text, width, font_size), encoding="utf-8")

                clip_path = work_dir / f"clip_{index:03d}.mp4"
                cmd = build_still_clip_cmd(
                    str(image_path),
                    str(clip_path),
                    duration,
                    width,
                    height,
                    fps=self.fps,
                    caption_file=str(caption_file) if caption_file else None,
                    caption=caption,
                )
                await run_ffmpeg(cmd, f"Scene {index} render", timeout=self.timeout)
                clip_paths.append(str(clip_path))

            silent_path = work_dir / "silent.mp4"
            await self._concat(clip_paths, silent_path, width, height)

            if not audio_path and not music_path:
                return str(silent_path)

            final_path = work_dir / "final.mp4"
            await self._mux(silent_path, final_path, audio_path, music_path)
            return str(final_path)

    async def concatenate_videos(
        self,
        handles: List[str],
        width: int,
        height: int,
        audio_url: Optional[str] = None,
    ) -> str:
        if not handles:
            raise InfrastructureError("No videos to concatenate")

        work_dir = self._new_work_dir("concat")
        paths = [
            str(await materialize_handle(handle, work_dir, f"part_{index:03d}", "mp4"))
            for index, handle in enumerate(handles, start=1)
        ]
        joined_path = work_dir / "joined.mp4"
        await self._concat(paths, joined_path, width, height)

        if not audio_url:
            return str(joined_path)

        audio_path = await materialize_handle(audio_url, work_dir, "narration", "wav")
        final_path = work_dir / "final.mp4"
        await self._mux(joined_path, final_path, audio_path, None)
        return str(final_path)

    async def _concat(self, paths: List[str], output_path: Path, width: int, height: int) -> None:
        list_path = write_concat_list(paths, output_path.with_suffix(".txt"))
        try:
            await run_ffmpeg(build_concat_cmd(str(list_path), str(output_path)), "Concatenation", self.timeout)
        except InfrastructureError:
            logger.warning("Stream-copy concat failed, re-encoding")
            await run_ffmpeg(
                build_concat_cmd(str(list_path), str(output_path), width, height, reencode=True),
                "Concatenation (re-encode)",
                self.timeout,
            )

    async def _mux(
        self,
        video_path: Path,
        output_path: Path,
        audio_path: Optional[Path],
        music_path: Optional[Path],
    ) -> None:
        video_duration = await get_media_duration(str(video_path))
        audio_duration = await get_media_duration(str(audio_path)) if audio_path else 0.0
        cmd = build_audio_mux_cmd(
            str(video_path),
            str(output_path),
            video_duration,
            audio_path=str(audio_path) if audio_path else None,
            audio_duration=audio_duration,
            background_music_path=str(music_path) if music_path else None,
        )
        await run_ffmpeg(cmd, "Audio mux", self.timeout)


__all__ = ["FFmpegRenderProvider"]
