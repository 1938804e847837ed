"""
Tests for shortmaker.services.providers.gemini_provider

The google-genai client is replaced with a MagicMock; request configs are
built with the real SDK types.
"""

import base64
import io
import json
import wave
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from shortmaker.core import decode_data_uri
from shortmaker.core.exceptions import (
    MalformedOutputError,
    PermissionDeniedError,
    QuotaExceededError,
    TransientProviderError,
)
from shortmaker.services.providers.base import ImageRequest
from shortmaker.services.providers.gemini_provider import (
    GeminiImageProvider,
    GeminiSpeechProvider,
    GeminiTextProvider,
    extract_inline_payload,
    normalize_voice,
    parse_mime,
)


def _inline_response(data, mime_type):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(text=None, candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def _client(response=None, error=None):
    client = MagicMock()
    if error is not None:
        client.models.generate_content.side_effect = error
    else:
        client.models.generate_content.return_value = response
    return client


class TestHelpers:
    def test_normalize_voice(self):
        assert normalize_voice("puck") == "Puck"
        assert normalize_voice("  Charon ") == "Charon"
        assert normalize_voice("Robot") == "Kore"
        assert normalize_voice(None) == "Kore"

    def test_parse_mime(self):
        assert parse_mime("audio/L16;codec=pcm;rate=16000") == ("audio/l16", {"codec": "pcm", "rate": "16000"})
        assert parse_mime(None) == (None, {})

    def test_inline_payload_from_base64_text(self):
        data, mime = extract_inline_payload(_inline_response(base64.b64encode(b"png!").decode(), "image/png"))
        assert (data, mime) == (b"png!", "image/png")

    def test_no_inline_payload(self):
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))])
        with pytest.raises(MalformedOutputError):
            extract_inline_payload(response)


@pytest.mark.asyncio
class TestTextProvider:
    async def test_schema_hint_requests_json(self):
        client = _client(SimpleNamespace(text='{"title": "x"}'))
        provider = GeminiTextProvider(client, model="gemini-test")

        text = await provider.generate_text("Idea", system_instruction="Be brief", schema_hint={"type": "object"})

        assert text == '{"title": "x"}'
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "Idea"
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].system_instruction.startswith("Be brief")
        assert json.dumps({"type": "object"}, indent=2) in kwargs["config"].system_instruction

    async def test_empty_response_text(self):
        provider = GeminiTextProvider(_client(SimpleNamespace(text=None)))
        assert await provider.generate_text("Idea") == ""

    async def test_quota_error_is_classified(self):
        provider = GeminiTextProvider(_client(error=Exception("429 RESOURCE_EXHAUSTED. Quota exceeded")))

        with pytest.raises(QuotaExceededError) as exc_info:
            await provider.generate_text("Idea")

        assert exc_info.value.provider == "gemini"
        assert exc_info.value.message.startswith("Daily AI quota exceeded")

    async def test_permission_error_is_classified(self):
        provider = GeminiTextProvider(_client(error=Exception("403 PERMISSION_DENIED")))
        with pytest.raises(PermissionDeniedError):
            await provider.generate_text("Idea")

    async def test_server_error_is_transient(self):
        provider = GeminiTextProvider(_client(error=Exception("503 UNAVAILABLE. The model is overloaded")))

        with pytest.raises(TransientProviderError) as exc_info:
            await provider.generate_text("Idea")

        assert not exc_info.value.fatal


@pytest.mark.asyncio
class TestImageProvider:
    async def test_returns_data_uri(self):
        client = _client(_inline_response(b"\x89PNG-bytes", "image/png"))
        provider = GeminiImageProvider(client)

        handle = await provider.generate_image(
            ImageRequest(prompt="A fox", model_id="gemini-2.5-flash-image", aspect_ratio="9:16", seed=42)
        )

        assert decode_data_uri(handle) == (b"\x89PNG-bytes", "image/png")
        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.image_config.aspect_ratio == "9:16"
        assert config.seed == 42

    async def test_missing_image(self):
        provider = GeminiImageProvider(_client(SimpleNamespace(candidates=[])))
        with pytest.raises(MalformedOutputError):
            await provider.generate_image(ImageRequest(prompt="A fox", model_id="m", aspect_ratio="1:1"))


@pytest.mark.asyncio
class TestSpeechProvider:
    async def test_raw_pcm_is_wrapped_with_reported_rate(self):
        client = _client(_inline_response(b"\x01\x00" * 100, "audio/L16;codec=pcm;rate=16000"))
        provider = GeminiSpeechProvider(client, model="tts-test")

        blob = await provider.synthesize_speech("Hello there", "puck")

        with wave.open(io.BytesIO(blob), "rb") as wavf:
            assert wavf.getframerate() == 16000
            assert wavf.getnchannels() == 1
            assert wavf.getnframes() == 100
        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Puck"

    async def test_wav_is_returned_untouched(self):
        wav = io.BytesIO()
        with wave.open(wav, "wb") as wavf:
            wavf.setnchannels(1)
            wavf.setsampwidth(2)
            wavf.setframerate(24000)
            wavf.writeframes(b"\x00\x00" * 10)
        provider = GeminiSpeechProvider(_client(_inline_response(wav.getvalue(), "audio/wav")))

        assert await provider.synthesize_speech("Hi", "Kore") == wav.getvalue()
