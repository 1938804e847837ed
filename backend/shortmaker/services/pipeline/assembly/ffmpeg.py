"""
Audio and video utilities for ffmpeg operations

Command builders are pure functions returning argv lists so they can be
tested without the binary; ``run_ffmpeg`` / ``get_media_duration`` execute
them off the event loop.
"""

import asyncio
import subprocess
import textwrap
from pathlib import Path
from typing import List, Optional

from shortmaker import config
from shortmaker.config.constants import BACKGROUND_MUSIC_VOLUME, DEFAULT_FPS, MAX_ZOOM
from shortmaker.core import InfrastructureError, get_logger
from shortmaker.models.manifest import CaptionSettings

logger = get_logger(__name__, component="ffmpeg")

CAPTION_BOX_OPACITY = 0.6
CAPTION_MAX_WIDTH = 0.85
# Rough glyph width as a fraction of the font size, used for line wrapping
_GLYPH_WIDTH_RATIO = 0.55


async def run_ffmpeg(cmd: List[str], operation: str, timeout: float = 300) -> None:
    """Run an ffmpeg command, raising ``InfrastructureError`` on failure."""
    try:
        result = await asyncio.to_thread(
            subprocess.run,
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise InfrastructureError(f"{cmd[0]} binary not found; install ffmpeg or set FFMPEG_BINARY") from exc
    except subprocess.TimeoutExpired as exc:
        raise InfrastructureError(f"{operation} timed out after {timeout:g}s") from exc

    if result.returncode != 0:
        tail = (result.stderr or "")[-500:]
        logger.error(f"{operation} failed", extra={"returncode": result.returncode, "stderr": tail})
        raise InfrastructureError(f"{operation} failed: {tail.strip().splitlines()[-1] if tail.strip() else 'ffmpeg error'}")


async def get_media_duration(file_path: str) -> float:
    """Get duration of a media file using ffprobe (0.0 when unknown)"""
    cmd = [
        config.FFPROBE_BINARY, "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(file_path),
    ]
    try:
        result = await asyncio.to_thread(
            subprocess.run,
            cmd,
            capture_output=True,
            text=True,
            timeout=30,
        )
        return float(result.stdout.strip())
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        logger.warning(f"Could not read duration for {file_path}: {e}")
        return 0.0


def wrap_caption(text: str, width: int, font_size: int) -> str:
    """Wrap caption text so lines stay within the caption's max width."""
    max_chars = max(8, int(width * CAPTION_MAX_WIDTH / (font_size * _GLYPH_WIDTH_RATIO)))
    return "\n".join(textwrap.wrap(" ".join(text.split()), width=max_chars))


def build_caption_filter(
    caption_file: str,
    width: int,
    height: int,
    caption: CaptionSettings,
) -> str:
    """drawtext filter reading its text from ``caption_file``."""
    font_size = max(12, int(height * caption.font_scale))
    escaped_path = caption_file.replace("\\", "/").replace(":", "\\:").replace("'", "\\'")
    parts = [
        f"drawtext=textfile='{escaped_path}'",
        "fontcolor=white",
        f"fontsize={font_size}",
        "line_spacing=8",
        "x=(w-text_w)/2",
        f"y=h*{caption.position:.3f}-text_h/2",
    ]
    if caption.style == "boxed":
        parts += [
            "box=1",
            f"boxcolor=black@{CAPTION_BOX_OPACITY}",
            f"boxborderw={max(8, font_size // 2)}",
        ]
    else:
        parts += ["borderw=2", "bordercolor=black"]
    return ":".join(parts)


def build_still_clip_cmd(
    image_path: str,
    output_path: str,
    duration: float,
    width: int,
    height: int,
    fps: int = DEFAULT_FPS,
    caption_file: Optional[str] = None,
    caption: Optional[CaptionSettings] = None,
) -> List[str]:
    """Build ffmpeg command turning one still into a clip with a slow zoom.

    The image is scaled to cover the frame, zoomed from 1.0 to MAX_ZOOM over
    the clip and, when a caption file is given, captioned.
    """
    frames = max(1, int(round(duration * fps)))
    zoom_step = (MAX_ZOOM - 1.0) / frames
    filters = [
        f"scale={width * 2}:{height * 2}:force_original_aspect_ratio=increase",
        f"crop={width * 2}:{height * 2}",
        (
            f"zoompan=z='min(zoom+{zoom_step:.6f},{MAX_ZOOM})':d={frames}"
            f":x='iw/2-(iw/zoom/2)':y='ih/2-(ih/zoom/2)':s={width}x{height}:fps={fps}"
        ),
    ]
    if caption_file and caption and caption.enabled:
        filters.append(build_caption_filter(caption_file, width, height, caption))
    filters.append("format=yuv420p")

    return [
        config.FFMPEG_BINARY, "-y",
        "-loop", "1",
        "-i", image_path,
        "-vf", ",".join(filters),
        "-frames:v", str(frames),
        "-r", str(fps),
        "-c:v", "libx264",
        "-preset", "veryfast",
        "-pix_fmt", "yuv420p",
        "-an",
        output_path,
    ]


def write_concat_list(paths: List[str], list_path: Path) -> Path:
    with open(list_path, "w", encoding="utf-8") as f:
        for path in paths:
            escaped = str(Path(path).resolve()).replace("'", "'\\''")
            f.write(f"file '{escaped}'\n")
    return list_path


def build_concat_cmd(
    list_path: str,
    output_path: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
    reencode: bool = False,
) -> List[str]:
    """Concat demuxer command; ``reencode`` normalizes geometry when stream copy fails."""
    cmd = [
        config.FFMPEG_BINARY, "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", list_path,
    ]
    if not reencode:
        return cmd + ["-c", "copy", output_path]

    if width and height:
        cmd += [
            "-vf",
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2,setsar=1",
        ]
    return cmd + ["-c:v", "libx264", "-pix_fmt", "yuv420p", "-c:a", "aac", output_path]


def build_audio_mux_cmd(
    video_path: str,
    output_path: str,
    video_duration: float,
    audio_path: Optional[str] = None,
    audio_duration: float = 0.0,
    background_music_path: Optional[str] = None,
    music_volume: float = BACKGROUND_MUSIC_VOLUME,
) -> List[str]:
    """Build ffmpeg command to lay narration (and/or music) under a video.

    Strategy:
    - Video SHORTER than narration: pad with frozen last frame (tpad)
    - Video LONGER than narration: trim to narration length
    - Background music is looped, attenuated and mixed under the narration
    - Without narration the video length is kept and music is cut to it
    """
    cmd = [config.FFMPEG_BINARY, "-y", "-i", video_path]
    filter_parts: List[str] = []
    video_map = "0:v:0"
    target_duration = video_duration

    if audio_path:
        cmd += ["-i", audio_path]
        if audio_duration and video_duration and audio_duration - video_duration >= 0.1:
            pad_duration = audio_duration - video_duration
            logger.debug(f"Video shorter by {pad_duration:.1f}s - padding with last frame")
            filter_parts.append(f"[0:v]tpad=stop_duration={pad_duration:.3f}:stop_mode=clone[v]")
            video_map = "[v]"
        target_duration = audio_duration or video_duration

    if background_music_path:
        cmd += ["-stream_loop", "-1", "-i", background_music_path]
        music_index = 2 if audio_path else 1
        filter_parts.append(f"[{music_index}:a]volume={music_volume}[bg]")
        if audio_path:
            filter_parts.append("[1:a][bg]amix=inputs=2:duration=first:dropout_transition=0[a]")
            audio_map = "[a]"
        else:
            audio_map = "[bg]"
    else:
        audio_map = "1:a:0" if audio_path else None

    if filter_parts:
        cmd += ["-filter_complex", ";".join(filter_parts)]
    cmd += ["-map", video_map]
    if audio_map:
        cmd += ["-map", audio_map]

    cmd += ["-c:v", "libx264" if video_map == "[v]" else "copy", "-c:a", "aac"]
    if target_duration:
        cmd += ["-t", f"{target_duration:.3f}"]
    return cmd + [output_path]


__all__ = [
    "run_ffmpeg",
    "get_media_duration",
    "wrap_caption",
    "build_caption_filter",
    "build_still_clip_cmd",
    "write_concat_list",
    "build_concat_cmd",
    "build_audio_mux_cmd",
]
