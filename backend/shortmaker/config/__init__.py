"""
Application configuration and settings
"""

import os
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Model configuration
from .models import (
    ImageProviderKind,
    ImageBackend,
    ImageBackendSpec,
    IMAGE_BACKENDS,
    DEFAULT_IMAGE_BACKEND,
    get_image_backend_spec,
    PipelineModels,
    DEFAULT_PIPELINE_MODELS,
)

# Base directories
PACKAGE_DIR = Path(__file__).parent.parent
BACKEND_DIR = PACKAGE_DIR.parent
OUTPUT_DIR = Path(os.getenv("SHORTMAKER_OUTPUT_DIR", str(BACKEND_DIR / "outputs")))
MANIFEST_DIR = Path(os.getenv("SHORTMAKER_MANIFEST_DIR", str(BACKEND_DIR / "manifests")))

# Gemini credentials
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
USE_VERTEX_AI = os.getenv("USE_VERTEX_AI", "false").lower() == "true"
GCP_PROJECT_ID = os.getenv("GCP_PROJECT_ID")
GCP_LOCATION = os.getenv("GCP_LOCATION", "us-central1")

# Pollinations (Flux backend)
POLLINATIONS_BASE_URL = os.getenv("POLLINATIONS_BASE_URL", "https://image.pollinations.ai")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() == "true"

# External binaries
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", "ffmpeg")
FFPROBE_BINARY = os.getenv("FFPROBE_BINARY", "ffprobe")
