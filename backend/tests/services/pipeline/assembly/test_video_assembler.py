"""
Tests for shortmaker.services.pipeline.assembly.video_assembler
"""

import pytest

from shortmaker.core import encode_data_uri
from shortmaker.core.exceptions import ConfigurationError, VideoAssemblyError
from shortmaker.models.manifest import Manifest
from shortmaker.services.pipeline.assembly import VideoAssembler, chunk_scenes, parse_resolution, usable_scenes


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1920x1080", (1920, 1080)),
        (" 720 X 1280 ", (720, 1280)),
        ("bogus", (1080, 1920)),
        ("0x0", (1080, 1920)),
        (None, (1080, 1920)),
    ],
)
def test_parse_resolution(value, expected):
    assert parse_resolution(value) == expected


def test_chunk_scenes():
    assert chunk_scenes(list(range(7)), 3) == [[0, 1, 2], [3, 4, 5], [6]]


def test_usable_scenes_skip_placeholders(make_scene, fakes):
    image = encode_data_uri(fakes.png_bytes, "image/png")
    manifest = Manifest(scenes=[
        make_scene(1, generated_image_url=image),
        make_scene(2, generated_image_url="https://via.placeholder.com/1080x1920"),
        make_scene(3),
        make_scene(4, generated_image_url="https://cdn.example.com/scene4.png"),
    ])
    assert [s.scene_number for s in usable_scenes(manifest)] == [1, 4]


@pytest.mark.asyncio
class TestSinglePass:
    async def test_renders_with_narration_and_music(self, fakes, make_manifest, job_state):
        renderer = fakes.FakeRenderProvider()
        manifest = make_manifest(6, with_images=True, generated_audio_url="/tmp/narration.wav")

        handle = await VideoAssembler(renderer, job_state).assemble(manifest, "https://music.example.com/calm.mp3")

        assert handle == "/videos/render_1.mp4"
        assert len(renderer.render_calls) == 1
        call = renderer.render_calls[0]
        assert (call["width"], call["height"]) == (1080, 1920)
        assert call["audio_url"] == "/tmp/narration.wav"
        assert call["background_music_url"] == "https://music.example.com/calm.mp3"
        assert call["scene_duration_ms"] is None
        assert [s.caption_text for s in call["scenes"]] == [f"Narration for scene {n}" for n in range(1, 7)]
        assert renderer.concat_calls == []
        assert "🎬 Rendering 6 scenes at 1080x1920" in job_state.state.logs

    async def test_manifest_resolution_is_used(self, fakes, make_manifest):
        renderer = fakes.FakeRenderProvider()
        manifest = make_manifest(2, with_images=True)
        manifest.output_settings.video_resolution = "1920x1080"

        await VideoAssembler(renderer).assemble(manifest)

        assert (renderer.render_calls[0]["width"], renderer.render_calls[0]["height"]) == (1920, 1080)

    async def test_render_failure(self, fakes, make_manifest):
        renderer = fakes.FakeRenderProvider(fail_on_call=1)

        with pytest.raises(VideoAssemblyError, match="encoder crashed"):
            await VideoAssembler(renderer).assemble(make_manifest(3, with_images=True))

    async def test_nothing_to_assemble(self, fakes, make_manifest):
        with pytest.raises(VideoAssemblyError, match="No images generated to assemble video"):
            await VideoAssembler(fakes.FakeRenderProvider()).assemble(make_manifest(3))

    async def test_fatal_errors_pass_through(self, fakes, make_manifest):
        class MisconfiguredRenderer(fakes.FakeRenderProvider):
            async def render_scenes(self, *args, **kwargs):
                raise ConfigurationError("Render API key is missing")

        with pytest.raises(ConfigurationError):
            await VideoAssembler(MisconfiguredRenderer()).assemble(make_manifest(2, with_images=True))


@pytest.mark.asyncio
class TestChunked:
    async def test_long_video_is_rendered_in_parts(self, fakes, make_manifest, job_state):
        renderer = fakes.FakeRenderProvider()
        manifest = make_manifest(20, with_images=True, generated_audio_url="/tmp/narration.wav")

        handle = await VideoAssembler(renderer, job_state).assemble(manifest, "https://music.example.com/calm.mp3")

        assert handle == "/videos/final.mp4"
        assert [len(c["scenes"]) for c in renderer.render_calls] == [15, 5]
        for call in renderer.render_calls:
            assert call["audio_url"] is None
            assert call["background_music_url"] is None
            assert call["scene_duration_ms"] == 5000
        assert renderer.concat_calls == [
            {"handles": ["/videos/render_1.mp4", "/videos/render_2.mp4"], "audio_url": "/tmp/narration.wav"}
        ]
        assert "🔗 Joining 2 parts" in job_state.state.logs

    async def test_chunk_size_is_configurable(self, fakes, make_manifest):
        renderer = fakes.FakeRenderProvider()

        await VideoAssembler(renderer, chunk_size=4).assemble(make_manifest(9, with_images=True))

        assert [len(c["scenes"]) for c in renderer.render_calls] == [4, 4, 1]

    async def test_part_failure_names_the_minute(self, fakes, make_manifest):
        renderer = fakes.FakeRenderProvider(fail_on_call=2)

        with pytest.raises(VideoAssemblyError) as exc_info:
            await VideoAssembler(renderer).assemble(make_manifest(40, with_images=True))

        assert exc_info.value.message == "Render failed at minute 2. Please try again."
        assert exc_info.value.chunk_index == 1
        assert len(renderer.render_calls) == 2
        assert renderer.concat_calls == []

    async def test_join_failure(self, fakes, make_manifest):
        renderer = fakes.FakeRenderProvider(fail_concat=True)

        with pytest.raises(VideoAssemblyError, match="Failed to join video parts"):
            await VideoAssembler(renderer).assemble(make_manifest(16, with_images=True))
