"""Video assembly - ffmpeg command building and rendering."""

from .video_assembler import VideoAssembler, chunk_scenes, parse_resolution, usable_scenes

__all__ = ["VideoAssembler", "chunk_scenes", "parse_resolution", "usable_scenes"]
