"""
Gemini client factory - works with both the Gemini API and Vertex AI

Environment Variables:
    USE_VERTEX_AI: Set to 'true' to use Vertex AI instead of the Gemini API
    GEMINI_API_KEY: API key for the Gemini API (when USE_VERTEX_AI=false)
    GCP_PROJECT_ID: GCP project ID (when USE_VERTEX_AI=true)
    GCP_LOCATION: GCP region (default: us-central1, when USE_VERTEX_AI=true)

Usage:
    client = create_gemini_client()
    response = client.models.generate_content(model="gemini-2.5-flash", contents="Hello!")
"""

from typing import Any, Optional

from google import genai

from shortmaker import config
from shortmaker.core import ConfigurationError, get_logger

logger = get_logger(__name__, component="gemini_client")


def create_gemini_client(
    api_key: Optional[str] = None,
    use_vertex_ai: Optional[bool] = None,
) -> Any:
    """
    Build a ``google.genai.Client`` for the configured backend.

    Args:
        api_key: Optional API key; falls back to GEMINI_API_KEY
        use_vertex_ai: Override for USE_VERTEX_AI

    Raises:
        ConfigurationError: If the selected backend is missing its credentials
    """
    use_vertex_ai = config.USE_VERTEX_AI if use_vertex_ai is None else use_vertex_ai

    if use_vertex_ai:
        if not config.GCP_PROJECT_ID:
            raise ConfigurationError(
                "GCP_PROJECT_ID environment variable is required when USE_VERTEX_AI=true",
                provider="gemini",
            )
        logger.info(f"Using Vertex AI backend ({config.GCP_PROJECT_ID}/{config.GCP_LOCATION})")
        return genai.Client(
            vertexai=True,
            project=config.GCP_PROJECT_ID,
            location=config.GCP_LOCATION,
        )

    api_key = api_key or config.GEMINI_API_KEY
    if not api_key:
        raise ConfigurationError(
            "GEMINI_API_KEY is not set. Add a Gemini API key to the environment or .env file.",
            provider="gemini",
        )
    return genai.Client(api_key=api_key)


__all__ = ["create_gemini_client"]
