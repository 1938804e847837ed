"""
Gemini providers

Text, image and speech adapters on top of the ``google-genai`` SDK. The SDK
is synchronous, so every call runs through ``asyncio.to_thread``. Any SDK
exception is translated with ``classify_provider_error`` before it leaves
this module.
"""

import asyncio
import base64
import binascii
import json
from typing import Any, Dict, Optional, Tuple

from google.genai import types

from shortmaker.config import DEFAULT_PIPELINE_MODELS
from shortmaker.config.constants import (
    DEFAULT_VOICE,
    PCM_CHANNELS,
    PCM_SAMPLE_RATE,
    SCRIPT_MAX_OUTPUT_TOKENS,
    SCRIPT_TEMPERATURE,
)
from shortmaker.core import (
    MalformedOutputError,
    ProviderError,
    classify_provider_error,
    encode_data_uri,
    get_logger,
)
from shortmaker.services.infrastructure.llm.gemini import create_gemini_client
from shortmaker.services.pipeline.audio.wav import is_wav, wrap_pcm

from .base import (
    ImageProvider,
    ImageRequest,
    SpeechProvider,
    TextGenerationConfig,
    TextProvider,
)

logger = get_logger(__name__, component="gemini_provider")

PROVIDER_NAME = "gemini"

# ---------------------------------------------------------------------------
# Gemini TTS voice catalog
# ---------------------------------------------------------------------------
GEMINI_VOICES = {
    "Zephyr": "Bright",
    "Puck": "Upbeat",
    "Charon": "Informative",
    "Kore": "Firm",
    "Fenrir": "Excitable",
    "Leda": "Youthful",
    "Orus": "Firm",
    "Aoede": "Breezy",
    "Callirrhoe": "Easy-going",
    "Autonoe": "Bright",
    "Enceladus": "Breathy",
    "Iapetus": "Clear",
    "Umbriel": "Easy-going",
    "Algieba": "Smooth",
    "Despina": "Smooth",
    "Erinome": "Clear",
    "Algenib": "Gravelly",
    "Rasalgethi": "Informative",
    "Laomedeia": "Upbeat",
    "Achernar": "Soft",
    "Alnilam": "Firm",
    "Schedar": "Even",
    "Gacrux": "Mature",
    "Pulcherrima": "Forward",
    "Achird": "Friendly",
    "Zubenelgenubi": "Casual",
    "Vindemiatrix": "Gentle",
    "Sadachbia": "Lively",
    "Sadaltager": "Knowledgeable",
    "Sulafat": "Warm",
}


def normalize_voice(voice: Optional[str]) -> str:
    """Map a voice id onto the catalog (case-insensitive), else the default."""
    if voice:
        for name in GEMINI_VOICES:
            if name.lower() == voice.strip().lower():
                return name
        logger.warning(f"Unknown Gemini voice '{voice}', falling back to {DEFAULT_VOICE}")
    return DEFAULT_VOICE


def parse_mime(mime_type: Optional[str]) -> Tuple[Optional[str], Dict[str, str]]:
    if not mime_type:
        return None, {}
    parts = [part.strip() for part in mime_type.split(";") if part.strip()]
    params: Dict[str, str] = {}
    for part in parts[1:]:
        if "=" in part:
            key, value = part.split("=", 1)
            params[key.strip().lower()] = value.strip()
    return (parts[0].lower() if parts else None), params


def extract_inline_payload(response: Any) -> Tuple[bytes, Optional[str]]:
    """Return the first inline binary part of a response as ``(bytes, mime)``.

    Raises:
        MalformedOutputError: The response carries no inline data.
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            if not inline_data:
                continue
            data = getattr(inline_data, "data", None)
            mime_type = getattr(inline_data, "mime_type", None)
            if isinstance(data, bytes) and data:
                return data, mime_type
            if isinstance(data, str) and data:
                try:
                    return base64.b64decode(data), mime_type
                except (binascii.Error, ValueError) as exc:
                    raise MalformedOutputError("Unable to decode inline payload", PROVIDER_NAME) from exc
    raise MalformedOutputError("Response contained no inline media", PROVIDER_NAME)


class _GeminiAdapter:
    """Shared client handling for the Gemini adapters."""

    def __init__(self, client: Any = None):
        # Raises ConfigurationError when credentials are missing
        self.client = client if client is not None else create_gemini_client()

    async def _generate(self, operation: str, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(self.client.models.generate_content, **kwargs)
        except ProviderError:
            raise
        except Exception as exc:
            raise classify_provider_error(exc, PROVIDER_NAME, operation) from exc


class GeminiTextProvider(_GeminiAdapter, TextProvider):
    """Script writing through a Gemini text model."""

    name = PROVIDER_NAME

    def __init__(self, client: Any = None, model: Optional[str] = None):
        super().__init__(client)
        self.model = model or DEFAULT_PIPELINE_MODELS.script_generation

    async def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        schema_hint: Optional[Dict[str, Any]] = None,
        config: Optional[TextGenerationConfig] = None,
    ) -> str:
        config = config or TextGenerationConfig(
            temperature=SCRIPT_TEMPERATURE,
            max_output_tokens=SCRIPT_MAX_OUTPUT_TOKENS,
        )
        instruction = system_instruction or ""
        if schema_hint:
            instruction += "\n\nRespond with JSON matching this schema:\n" + json.dumps(schema_hint, indent=2)

        gen_config = types.GenerateContentConfig(
            system_instruction=instruction or None,
            temperature=config.temperature,
            max_output_tokens=config.max_output_tokens,
            response_mime_type="application/json" if schema_hint else None,
            **config.extra_options,
        )
        response = await self._generate(
            "Script generation",
            model=config.model or self.model,
            contents=prompt,
            config=gen_config,
        )
        return getattr(response, "text", None) or ""


class GeminiImageProvider(_GeminiAdapter, ImageProvider):
    """Scene images from the Gemini image models (symbolic aspect ratio)."""

    name = PROVIDER_NAME

    async def generate_image(self, request: ImageRequest) -> str:
        gen_config = types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(aspect_ratio=request.aspect_ratio),
            seed=request.seed,
        )
        response = await self._generate(
            "Image generation",
            model=request.model_id,
            contents=request.prompt,
            config=gen_config,
        )
        data, mime_type = extract_inline_payload(response)
        return encode_data_uri(data, mime_type or "image/png")


class GeminiSpeechProvider(_GeminiAdapter, SpeechProvider):
    """Narration through Gemini TTS; always returns a WAV blob."""

    name = PROVIDER_NAME
    VOICES = GEMINI_VOICES

    def __init__(self, client: Any = None, model: Optional[str] = None):
        super().__init__(client)
        self.model = model or DEFAULT_PIPELINE_MODELS.speech_synthesis

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        gen_config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=normalize_voice(voice),
                    )
                )
            ),
        )
        response = await self._generate(
            "Speech synthesis",
            model=self.model,
            contents=text,
            config=gen_config,
        )
        data, mime_type = extract_inline_payload(response)
        if is_wav(data):
            return data

        # Gemini answers with raw L16 PCM ("audio/L16;codec=pcm;rate=24000")
        _, params = parse_mime(mime_type)
        return wrap_pcm(
            data,
            sample_rate=int(params.get("rate", PCM_SAMPLE_RATE)),
            channels=int(params.get("channels", PCM_CHANNELS)),
        )


__all__ = [
    "GEMINI_VOICES",
    "normalize_voice",
    "parse_mime",
    "extract_inline_payload",
    "GeminiTextProvider",
    "GeminiImageProvider",
    "GeminiSpeechProvider",
]
