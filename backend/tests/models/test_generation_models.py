"""
Tests for models/generation and models/manifest

Request validation, plan resolution and manifest parsing.
"""

import pytest
from pydantic import ValidationError

from shortmaker.models.generation import (
    AspectRatio,
    DurationTier,
    ProductionMode,
    StoryRequest,
    resolution_for_aspect_ratio,
    resolve_plan,
    scene_count_for_tier,
)
from shortmaker.models.manifest import CaptionSettings, Manifest, Scene, VoiceInstruction
from shortmaker.models.status import ManifestStatus


class TestStoryRequest:
    def test_defaults(self):
        request = StoryRequest(idea="A fox learns to fly")
        assert request.mode == ProductionMode.SHORTS
        assert request.duration_tier == "30s"
        assert request.aspect_ratio is None

    def test_idea_is_stripped(self):
        assert StoryRequest(idea="  a fox  ").idea == "a fox"

    @pytest.mark.parametrize("idea", ["", "   \n "])
    def test_blank_idea_rejected(self, idea):
        with pytest.raises(ValidationError):
            StoryRequest(idea=idea)

    def test_duration_tier_enum_accepted(self):
        assert StoryRequest(idea="x", duration_tier=DurationTier.MINUTES_5).duration_tier == "5m"

    def test_sanitized_idea(self):
        request = StoryRequest(idea='The "last"\n\nlighthouse   keeper ' + "x" * 600)
        sanitized = request.sanitized_idea()
        assert '"' not in sanitized
        assert "\n" not in sanitized
        assert sanitized.startswith("The 'last' lighthouse keeper x")
        assert len(sanitized) <= 500


class TestResolvePlan:
    @pytest.mark.parametrize("tier, count", [("15s", 3), ("30s", 6), ("60s", 12), ("5m", 60), ("10m", 120), ("20m", 240)])
    def test_tier_scene_counts(self, tier, count):
        assert resolve_plan(StoryRequest(idea="x", duration_tier=tier)).scene_count == count

    def test_unknown_tier_falls_back(self):
        assert scene_count_for_tier("3h") == 6
        assert scene_count_for_tier(None) == 6

    def test_shorts_default_portrait(self):
        plan = resolve_plan(StoryRequest(idea="x"))
        assert plan.aspect_ratio == AspectRatio.PORTRAIT
        assert plan.resolution == "1080x1920"

    def test_storybook_default_landscape(self):
        plan = resolve_plan(StoryRequest(idea="x", mode="storybook"))
        assert plan.aspect_ratio == AspectRatio.LANDSCAPE
        assert plan.resolution == "1920x1080"

    def test_explicit_aspect_ratio_wins(self):
        plan = resolve_plan(StoryRequest(idea="x", mode="storybook", aspect_ratio="1:1"))
        assert plan.aspect_ratio == AspectRatio.SQUARE
        assert plan.resolution == "1080x1080"

    def test_resolution_fallback(self):
        assert resolution_for_aspect_ratio("21:9") == "1080x1920"
        assert resolution_for_aspect_ratio(AspectRatio.CLASSIC) == "1440x1080"


class TestManifest:
    def test_accepts_camel_case(self):
        manifest = Manifest.model_validate({
            "title": "Fox",
            "voiceInstruction": {"voice": "Puck"},
            "outputSettings": {"videoResolution": "1080x1080"},
            "scenes": [{"sceneNumber": 1, "narrationText": "Hello", "imagePrompt": "A fox"}],
        })
        assert manifest.voice_instruction.voice == "Puck"
        assert manifest.output_settings.video_resolution == "1080x1080"
        assert manifest.scenes[0].narration_text == "Hello"
        assert manifest.scenes[0].image_prompt == "A fox"

    def test_tokens_coerced_from_string(self):
        scene = Scene.model_validate({"character_tokens": "red fox, old owl", "environment_tokens": None})
        assert scene.character_tokens == ["red fox", "old owl"]
        assert scene.environment_tokens == []

    def test_null_text_fields_become_empty(self):
        scene = Scene.model_validate({"narration_text": None, "image_prompt": None})
        assert scene.narration_text == ""
        assert scene.image_prompt == ""

    def test_unknown_fields_ignored(self):
        manifest = Manifest.model_validate({"title": "x", "mood": "happy", "scenes": []})
        assert not hasattr(manifest, "mood")

    def test_defaults(self):
        manifest = Manifest()
        assert manifest.status == ManifestStatus.CREATED
        assert manifest.scene_count == 0
        assert manifest.output_settings.caption_style is None
        assert CaptionSettings().style == "boxed"

    def test_null_advisory_blocks_use_defaults(self):
        manifest = Manifest.model_validate({
            "title": None,
            "voiceInstruction": None,
            "output_settings": None,
            "scenes": [{"sceneNumber": None, "duration_seconds": None, "timecodes": {"start_second": None}}],
        })
        assert manifest.title == ""
        assert manifest.voice_instruction == VoiceInstruction()
        assert manifest.output_settings.video_resolution == "1080x1920"
        assert manifest.scenes[0].scene_number == 0
        assert manifest.scenes[0].duration_seconds == 5
        assert manifest.scenes[0].timecodes.start_second == 0.0

    def test_null_scene_list(self):
        assert Manifest.model_validate({"title": "x", "scenes": None}).scenes == []

    def test_json_round_trip_keeps_snake_case(self):
        manifest = Manifest(title="Fox", scenes=[Scene(scene_number=1, narration_text="Hi")])
        data = manifest.model_dump(mode="json")
        assert data["scenes"][0]["narration_text"] == "Hi"
        assert Manifest.model_validate(data) == manifest
