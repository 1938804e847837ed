"""
Pipeline constants

Scene-count tiers, batching / chunking thresholds, timeouts and media
geometry shared by every pipeline stage. Tunables can be overridden through
the environment (see ``_env_int`` / ``_env_float``).
"""

import os


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except (TypeError, ValueError):
        return default


# =============================================================================
# Duration tiers
# =============================================================================

# Single source of truth for "how much work exists". Both the script batching
# strategy and the video chunking strategy are derived from these counts.
DURATION_TIER_SCENES = {
    "15s": 3,
    "30s": 6,
    "60s": 12,
    "5m": 60,
    "10m": 120,
    "20m": 240,
}
DEFAULT_SCENE_COUNT = 6

# Output resolution per aspect ratio ("WxH")
ASPECT_RATIO_RESOLUTIONS = {
    "9:16": "1080x1920",
    "16:9": "1920x1080",
    "1:1": "1080x1080",
    "4:3": "1440x1080",
}

# Pixel sizes for image backends that need explicit dimensions
IMAGE_DIMENSIONS = {
    "9:16": (720, 1280),
    "16:9": (1280, 720),
    "1:1": (1024, 1024),
    "4:3": (1024, 768),
}

# =============================================================================
# Script generation
# =============================================================================

SINGLE_CALL_SCENE_LIMIT = 15
SCRIPT_BATCH_SIZE = _env_int("SCRIPT_BATCH_SIZE", 5, 1)
SCRIPT_BATCH_COOLDOWN = _env_float("SCRIPT_BATCH_COOLDOWN", 2.0, 0.0)
SCRIPT_MAX_ATTEMPTS = _env_int("SCRIPT_MAX_ATTEMPTS", 3, 1)
SCRIPT_RETRY_DELAY = _env_float("SCRIPT_RETRY_DELAY", 2.0, 0.0)
SCRIPT_CALL_TIMEOUT = _env_float("SCRIPT_CALL_TIMEOUT", 90.0, 1.0)
SCRIPT_TEMPERATURE = 0.3
SCRIPT_MAX_OUTPUT_TOKENS = 8192
MAX_NARRATION_WORDS = 25
MAX_IDEA_CHARS = 500

# Raw provider text longer than this that also fails to parse is reported
# as "output too long" rather than generic malformed output.
MAX_SCRIPT_RESPONSE_CHARS = 20000

# =============================================================================
# Image synthesis
# =============================================================================

DEFAULT_IMAGE_STYLE = "Cinematic"
MAX_IMAGE_PROMPT_CHARS = 1000
MIN_IMAGE_PROMPT_CHARS = 10
IMAGE_MAX_ATTEMPTS = _env_int("IMAGE_MAX_ATTEMPTS", 5, 1)
IMAGE_RETRY_BASE_DELAY = _env_float("IMAGE_RETRY_BASE_DELAY", 2.0, 0.0)
IMAGE_CALL_TIMEOUT = _env_float("IMAGE_CALL_TIMEOUT", 60.0, 1.0)

# =============================================================================
# Speech synthesis / audio assembly
# =============================================================================

DEFAULT_VOICE = "Kore"
TTS_MAX_CONCURRENT = _env_int("TTS_MAX_CONCURRENT", 5, 1)
TTS_BATCH_PAUSE = _env_float("TTS_BATCH_PAUSE", 1.0, 0.0)
TTS_CALL_TIMEOUT = _env_float("TTS_CALL_TIMEOUT", 60.0, 1.0)
TTS_MAX_ATTEMPTS = _env_int("TTS_MAX_ATTEMPTS", 2, 1)
TTS_RETRY_DELAY = _env_float("TTS_RETRY_DELAY", 1.0, 0.0)
WORDS_PER_SECOND = 2.5

WAV_HEADER_SIZE = 44
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2

# =============================================================================
# Video assembly
# =============================================================================

VIDEO_CHUNK_SIZE = _env_int("VIDEO_CHUNK_SIZE", 15, 1)
DEFAULT_VIDEO_RESOLUTION = "1080x1920"
DEFAULT_FPS = 30
DEFAULT_SCENE_DURATION_SECONDS = 5
DEFAULT_SCENE_DURATION_MS = 5000
MAX_ZOOM = 1.15
BACKGROUND_MUSIC_VOLUME = 0.15
RENDER_TIMEOUT = _env_float("RENDER_TIMEOUT", 600.0, 10.0)

__all__ = [
    "DURATION_TIER_SCENES",
    "DEFAULT_SCENE_COUNT",
    "ASPECT_RATIO_RESOLUTIONS",
    "IMAGE_DIMENSIONS",
    "SINGLE_CALL_SCENE_LIMIT",
    "SCRIPT_BATCH_SIZE",
    "SCRIPT_BATCH_COOLDOWN",
    "SCRIPT_MAX_ATTEMPTS",
    "SCRIPT_RETRY_DELAY",
    "SCRIPT_CALL_TIMEOUT",
    "SCRIPT_TEMPERATURE",
    "SCRIPT_MAX_OUTPUT_TOKENS",
    "MAX_NARRATION_WORDS",
    "MAX_IDEA_CHARS",
    "MAX_SCRIPT_RESPONSE_CHARS",
    "DEFAULT_IMAGE_STYLE",
    "MAX_IMAGE_PROMPT_CHARS",
    "MIN_IMAGE_PROMPT_CHARS",
    "IMAGE_MAX_ATTEMPTS",
    "IMAGE_RETRY_BASE_DELAY",
    "IMAGE_CALL_TIMEOUT",
    "DEFAULT_VOICE",
    "TTS_MAX_CONCURRENT",
    "TTS_BATCH_PAUSE",
    "TTS_CALL_TIMEOUT",
    "TTS_MAX_ATTEMPTS",
    "TTS_RETRY_DELAY",
    "WORDS_PER_SECOND",
    "WAV_HEADER_SIZE",
    "PCM_SAMPLE_RATE",
    "PCM_CHANNELS",
    "PCM_SAMPLE_WIDTH",
    "VIDEO_CHUNK_SIZE",
    "DEFAULT_VIDEO_RESOLUTION",
    "DEFAULT_FPS",
    "DEFAULT_SCENE_DURATION_SECONDS",
    "DEFAULT_SCENE_DURATION_MS",
    "MAX_ZOOM",
    "BACKGROUND_MUSIC_VOLUME",
    "RENDER_TIMEOUT",
]
