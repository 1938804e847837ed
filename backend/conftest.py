import json
import re
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest

from shortmaker.core import encode_data_uri
from shortmaker.models.manifest import Manifest, Scene
from shortmaker.services.infrastructure.orchestration.job_state import JobStateBroadcaster
from shortmaker.services.pipeline.audio.wav import wrap_pcm
from shortmaker.services.providers.base import (
    ImageProvider,
    ImageRequest,
    RenderProvider,
    SpeechProvider,
    TextProvider,
)

_COUNT_RE = re.compile(r"Output exactly (\d+) scenes, starting from Scene #(\d+)")

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def mock_cloud_env(monkeypatch, tmp_path):
    """Automatically mock credentials and output locations for all tests"""
    monkeypatch.setenv("GEMINI_API_KEY", "mock-key")
    monkeypatch.setenv("USE_VERTEX_AI", "false")
    monkeypatch.setattr("shortmaker.config.GEMINI_API_KEY", "mock-key")
    monkeypatch.setattr("shortmaker.config.USE_VERTEX_AI", False)
    monkeypatch.setattr("shortmaker.config.OUTPUT_DIR", tmp_path / "outputs")
    monkeypatch.setattr("shortmaker.config.MANIFEST_DIR", tmp_path / "manifests")


def script_payload(count: int, start: int = 1, title: str = "Tiny Story", **overrides: Any) -> Dict[str, Any]:
    """Script JSON as a text provider would return it (numbers deliberately off)."""
    payload = {
        "title": title,
        "final_caption": "The end",
        "voice_instruction": {"voice": "Puck", "lang": "en", "tone": "warm"},
        "output_settings": {"video_resolution": "640x480", "fps": 30, "scene_duration_default": 5},
        "scenes": [
            {
                "scene_number": 99,
                "duration_seconds": 5,
                "narration_text": f"Narration line {start + i} keeps the story moving",
                "visual_description": f"A wide shot of scene {start + i}",
                "character_tokens": ["red fox"],
                "environment_tokens": "snowy forest, dusk",
                "camera_directive": "slow pan",
                "image_prompt": f"Detailed painting of a red fox in scene {start + i}",
                "transition_to_next": "fade",
            }
            for i in range(count)
        ],
    }
    payload.update(overrides)
    return payload


class ScriptedTextProvider(TextProvider):
    """Answers every call with the requested number of scenes.

    ``failures`` maps a 1-based call number to the exception raised instead
    of answering; ``short_by`` maps a call number to how many scenes it
    leaves out.
    """

    name = "fake-text"

    def __init__(self, failures: Optional[Dict[int, Any]] = None, extra_scenes: int = 0,
                 short_by: Optional[Dict[int, int]] = None):
        self.failures = dict(failures or {})
        self.short_by = dict(short_by or {})
        self.extra_scenes = extra_scenes
        self.calls: List[Dict[str, Any]] = []

    async def generate_text(self, prompt, system_instruction=None, schema_hint=None, config=None):
        self.calls.append({"prompt": prompt, "system_instruction": system_instruction, "schema_hint": schema_hint})
        failure = self.failures.get(len(self.calls))
        if failure is not None:
            raise failure
        match = _COUNT_RE.search(system_instruction or "")
        count, start = (int(match.group(1)), int(match.group(2))) if match else (3, 1)
        count += self.extra_scenes - self.short_by.get(len(self.calls), 0)
        return json.dumps(script_payload(count, start=start))


class SequenceTextProvider(TextProvider):
    """Returns (or raises) the queued items in order."""

    name = "fake-text"

    def __init__(self, items: List[Any]):
        self.items = list(items)
        self.calls: List[Dict[str, Any]] = []

    async def generate_text(self, prompt, system_instruction=None, schema_hint=None, config=None):
        self.calls.append({"prompt": prompt, "system_instruction": system_instruction})
        item = self.items.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeImageProvider(ImageProvider):
    name = "fake-image"

    def __init__(self, failures: Optional[Dict[int, BaseException]] = None):
        self.failures = dict(failures or {})
        self.requests: List[ImageRequest] = []

    async def generate_image(self, request: ImageRequest) -> str:
        self.requests.append(request)
        failure = self.failures.get(len(self.requests))
        if failure is not None:
            raise failure
        return encode_data_uri(PNG_BYTES, "image/png")


class FakeSpeechProvider(SpeechProvider):
    """Returns ``samples_per_call`` samples of a per-text constant value."""

    name = "fake-speech"

    def __init__(self, samples_per_call: int = 2400, errors: Optional[Dict[str, BaseException]] = None):
        self.samples_per_call = samples_per_call
        self.errors = dict(errors or {})
        self.calls: List[str] = []

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        self.calls.append(text)
        for marker, error in self.errors.items():
            if marker in text:
                raise error
        value = (len(self.calls) % 120).to_bytes(2, "little")
        return wrap_pcm(value * self.samples_per_call)


class FakeRenderProvider(RenderProvider):
    name = "fake-render"

    def __init__(self, fail_on_call: Optional[int] = None, fail_concat: bool = False):
        self.fail_on_call = fail_on_call
        self.fail_concat = fail_concat
        self.render_calls: List[Dict[str, Any]] = []
        self.concat_calls: List[Dict[str, Any]] = []

    async def render_scenes(self, scenes, width, height, audio_url=None, scene_duration_ms=None,
                            background_music_url=None, caption_settings=None):
        self.render_calls.append({
            "scenes": list(scenes),
            "width": width,
            "height": height,
            "audio_url": audio_url,
            "scene_duration_ms": scene_duration_ms,
            "background_music_url": background_music_url,
        })
        if self.fail_on_call == len(self.render_calls):
            raise RuntimeError("encoder crashed")
        return f"/videos/render_{len(self.render_calls)}.mp4"

    async def concatenate_videos(self, handles, width, height, audio_url=None):
        self.concat_calls.append({"handles": list(handles), "audio_url": audio_url})
        if self.fail_concat:
            raise RuntimeError("concat failed")
        return "/videos/final.mp4"


@pytest.fixture
def job_state():
    return JobStateBroadcaster(job_id="test-job")


@pytest.fixture
def recorded_states(job_state):
    """Every snapshot the broadcaster publishes, in order."""
    states = []
    job_state.subscribe(states.append)
    return states


@pytest.fixture
def make_scene() -> Callable[..., Scene]:
    def _make(number: int = 1, **fields: Any) -> Scene:
        defaults = {
            "scene_number": number,
            "narration_text": f"Narration for scene {number}",
            "visual_description": f"Visual for scene {number}",
            "image_prompt": f"A lighthouse on a cliff at night, scene {number}",
        }
        defaults.update(fields)
        return Scene(**defaults)

    return _make


@pytest.fixture
def make_manifest(make_scene) -> Callable[..., Manifest]:
    def _make(scene_count: int = 3, with_images: bool = False, **fields: Any) -> Manifest:
        scenes = [
            make_scene(
                n,
                generated_image_url=encode_data_uri(PNG_BYTES, "image/png") if with_images else None,
            )
            for n in range(1, scene_count + 1)
        ]
        defaults = {"project_id": "proj-1", "seed": "abc123", "title": "Lighthouse", "scenes": scenes}
        defaults.update(fields)
        return Manifest(**defaults)

    return _make


@pytest.fixture
def fakes():
    """Fake providers and payload helpers shared by the pipeline tests."""
    return SimpleNamespace(
        script_payload=script_payload,
        ScriptedTextProvider=ScriptedTextProvider,
        SequenceTextProvider=SequenceTextProvider,
        FakeImageProvider=FakeImageProvider,
        FakeSpeechProvider=FakeSpeechProvider,
        FakeRenderProvider=FakeRenderProvider,
        png_bytes=PNG_BYTES,
    )
