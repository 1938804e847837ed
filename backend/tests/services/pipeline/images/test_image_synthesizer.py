"""
Tests for shortmaker.services.pipeline.images

Prompt enrichment, backend request shapes and per-scene seeds.
"""

import pytest

from shortmaker.config import ImageBackend, ImageProviderKind
from shortmaker.core.exceptions import ConfigurationError, QuotaExceededError
from shortmaker.models.generation import AspectRatio
from shortmaker.services.pipeline.images.prompts import (
    DEFAULT_MODIFIERS,
    build_image_prompt,
    primary_prompt,
    quality_modifiers,
)
from shortmaker.services.pipeline.images.synthesizer import SceneImageSynthesizer, derive_scene_seed


class TestPrompts:
    def test_prompt_layout(self, make_scene):
        scene = make_scene(
            1,
            image_prompt="A red fox leaping over a frozen river",
            character_tokens=["red fox", "blue scarf"],
            environment_tokens=["frozen river"],
        )

        prompt = build_image_prompt(scene, "Anime")

        assert prompt == (
            "(Anime style), A red fox leaping over a frozen river, "
            "Consistent character features: red fox, blue scarf, in frozen river, "
            "anime art, high quality, vibrant colors, detailed"
        )

    def test_default_style_is_cinematic(self, make_scene):
        prompt = build_image_prompt(make_scene(1), None)
        assert prompt.startswith("(Cinematic style), ")
        assert "photorealistic" in prompt

    @pytest.mark.parametrize(
        "style, marker",
        [
            ("Photorealistic documentary", "photorealistic"),
            ("Studio Ghibli", "anime art"),
            ("Children's storybook watercolor", "digital illustration"),
            ("Pixel art", "3d render"),
        ],
    )
    def test_quality_modifier_categories(self, style, marker):
        assert marker in quality_modifiers(style)

    def test_unknown_style_uses_defaults(self):
        assert quality_modifiers("Baroque") == DEFAULT_MODIFIERS

    def test_short_prompt_falls_back_to_visual_description(self, make_scene):
        scene = make_scene(1, image_prompt="fox", visual_description="A fox asleep under a pine tree")
        assert primary_prompt(scene) == "A fox asleep under a pine tree"

    def test_falls_back_to_narration(self, make_scene):
        scene = make_scene(1, image_prompt="", visual_description="", narration_text="The fox finally reached home")
        assert primary_prompt(scene) == "The fox finally reached home"

    def test_everything_short_uses_longest(self, make_scene):
        scene = make_scene(1, image_prompt="fox", visual_description="", narration_text="a fox")
        assert primary_prompt(scene) == "a fox"

    def test_prompt_is_truncated(self, make_scene):
        scene = make_scene(1, image_prompt="word " * 400)
        assert len(build_image_prompt(scene, "Cinematic")) == 1000


class TestSceneSeed:
    def test_deterministic_and_distinct(self):
        assert derive_scene_seed("abc", 1) == derive_scene_seed("abc", 1)
        assert derive_scene_seed("abc", 1) != derive_scene_seed("abc", 2)
        assert derive_scene_seed("abc", 1) != derive_scene_seed("xyz", 1)

    def test_fits_31_bits(self):
        for n in range(50):
            assert 0 <= derive_scene_seed("seed", n) <= 0x7FFFFFFF


class TestBuildRequest:
    def test_gemini_backend_uses_symbolic_ratio(self, fakes, make_scene):
        synth = SceneImageSynthesizer({ImageProviderKind.GEMINI: fakes.FakeImageProvider()})

        request = synth.build_request(make_scene(2), "abc", "Anime", AspectRatio.LANDSCAPE, ImageBackend.NANO_BANANA)

        assert request.model_id == "gemini-2.5-flash-image"
        assert request.aspect_ratio == "16:9"
        assert request.width is None and request.height is None
        assert request.seed == derive_scene_seed("abc", 2)

    def test_flux_backend_uses_pixel_dimensions(self, fakes, make_scene):
        synth = SceneImageSynthesizer({ImageProviderKind.POLLINATIONS: fakes.FakeImageProvider()})

        request = synth.build_request(make_scene(1), "abc", None, "9:16", "flux")

        assert request.model_id == "flux"
        assert (request.width, request.height) == (720, 1280)

    def test_same_inputs_same_request(self, fakes, make_scene):
        synth = SceneImageSynthesizer({ImageProviderKind.GEMINI: fakes.FakeImageProvider()})
        scene = make_scene(3)
        first = synth.build_request(scene, "abc", "Anime", "1:1", ImageBackend.GEMINI_PRO)
        second = synth.build_request(scene, "abc", "Anime", "1:1", ImageBackend.GEMINI_PRO)
        assert first == second


@pytest.mark.asyncio
class TestGenerate:
    async def test_routes_to_backend_provider(self, fakes, make_scene):
        gemini, pollinations = fakes.FakeImageProvider(), fakes.FakeImageProvider()
        synth = SceneImageSynthesizer(
            {ImageProviderKind.GEMINI: gemini, ImageProviderKind.POLLINATIONS: pollinations},
            reference_image_url="https://cdn.example.com/ref.png",
        )

        handle = await synth.generate(make_scene(1), "abc", backend=ImageBackend.FLUX)

        assert handle.startswith("data:image/png;base64,")
        assert gemini.requests == []
        assert pollinations.requests[0].reference_image_url == "https://cdn.example.com/ref.png"

    async def test_missing_provider(self, make_scene):
        synth = SceneImageSynthesizer({})
        with pytest.raises(ConfigurationError):
            await synth.generate(make_scene(1), "abc")

    async def test_fatal_error_propagates(self, fakes, make_scene):
        provider = fakes.FakeImageProvider(failures={1: QuotaExceededError("Daily AI quota exceeded.")})
        synth = SceneImageSynthesizer({ImageProviderKind.GEMINI: provider})

        with pytest.raises(QuotaExceededError):
            await synth.generate(make_scene(1), "abc")
