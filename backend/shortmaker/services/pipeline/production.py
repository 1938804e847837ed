"""
Production Runner - script, images, narration, video in one call

Drives the caller-side sequence over the pipeline stages and keeps the Job
State in step with it:

    created -> generating_script -> story_ready -> images_processing
            -> audio_processing -> assembling -> completed | failed

Tolerated failures:
    - a scene image that still fails after its retries (scene is skipped)
    - narration failing for non-fatal reasons (the video is rendered silent)

Everything else, and every fatal provider error, ends the run as failed.
A manifest checkpoint is handed to the persist hook after each phase.
"""

import asyncio
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from shortmaker.config import DEFAULT_IMAGE_BACKEND, ImageBackend
from shortmaker.config.constants import IMAGE_MAX_ATTEMPTS, IMAGE_RETRY_BASE_DELAY
from shortmaker.core import (
    FatalProviderError,
    ImageGenerationError,
    ShortMakerError,
    TransientProviderError,
    clear_context,
    get_logger,
    set_job_id,
)
from shortmaker.models.generation import ProductionPlan, StoryRequest, resolve_plan
from shortmaker.models.manifest import Manifest, Scene
from shortmaker.models.status import JobStatus
from shortmaker.services.infrastructure.orchestration.job_state import JobStateBroadcaster
from shortmaker.services.providers.base import PersistHook
from shortmaker.services.providers.factory import ProviderSet

from .assembly.video_assembler import VideoAssembler
from .audio.synthesizer import NarrationAudio, SpeechSynthesizer
from .images.synthesizer import SceneImageSynthesizer, derive_scene_seed
from .script_generation.generator import ScriptGenerator

logger = get_logger(__name__, component="production")


@dataclass
class ProductionOptions:
    """Per-run knobs that are not part of the story request"""
    image_backend: ImageBackend = DEFAULT_IMAGE_BACKEND
    voice_override: Optional[str] = None
    background_music_url: Optional[str] = None
    image_max_attempts: int = IMAGE_MAX_ATTEMPTS
    image_retry_base_delay: float = IMAGE_RETRY_BASE_DELAY


@dataclass
class ProductionResult:
    manifest: Manifest
    video_url: str
    audio: Optional[NarrationAudio] = None


class ProductionRunner:
    """Runs one production at a time against a dedicated Job State.

    Args:
        providers: Provider set (see ``build_default_providers``)
        job_state: Broadcaster to publish into; a new one is created if omitted
        persist: Optional checkpoint hook called with the current manifest
        output_dir: Where the narration track is written (inline data URI if None)
    """

    def __init__(
        self,
        providers: ProviderSet,
        job_state: Optional[JobStateBroadcaster] = None,
        persist: Optional[PersistHook] = None,
        output_dir: Optional[Path] = None,
    ):
        self.job_state = job_state or JobStateBroadcaster()
        self.persist = persist
        self.script_generator = ScriptGenerator(providers.text, self.job_state)
        self.image_synthesizer = SceneImageSynthesizer(providers.images)
        self.speech_synthesizer = SpeechSynthesizer(providers.speech, self.job_state, output_dir=output_dir)
        self.video_assembler = VideoAssembler(providers.render, self.job_state)

    async def run(self, request: StoryRequest, options: Optional[ProductionOptions] = None) -> ProductionResult:
        """
        Produce a finished video for ``request``.

        Raises:
            ShortMakerError: Any unrecovered stage failure (the Job State is ``failed``)
        """
        options = options or ProductionOptions()
        job_id = uuid.uuid4().hex
        self.job_state.job_id = job_id
        set_job_id(job_id)
        self.job_state.reset()

        try:
            plan = resolve_plan(request)
            self.job_state.add_log(f"🧠 Generating {request.duration_tier} story concept and script...")
            manifest = await self.script_generator.generate(request, plan)
            self._checkpoint()

            manifest = await self.generate_images(manifest, request, plan, options)
            self._checkpoint()

            manifest, audio = await self.generate_audio(manifest, options)
            self._checkpoint()

            self.job_state.update(status=JobStatus.ASSEMBLING)
            self.job_state.add_log("🎬 Stitching video frames and syncing audio...")
            video_url = await self.video_assembler.assemble(manifest, options.background_music_url)

            manifest = manifest.model_copy(update={"generated_video_url": video_url})
            self.job_state.update(status=JobStatus.COMPLETED, manifest=manifest, video_url=video_url)
            self.job_state.add_log("✅ Video assembly complete!")
            self._checkpoint()
            return ProductionResult(manifest=self.job_state.state.manifest, video_url=video_url, audio=audio)

        except ShortMakerError as exc:
            self._record_failure(exc.message)
            raise
        except Exception as exc:
            logger.error("Production crashed", exc_info=True)
            self._record_failure(f"Production failed: {exc}")
            raise
        finally:
            clear_context()

    async def generate_images(
        self,
        manifest: Manifest,
        request: StoryRequest,
        plan: ProductionPlan,
        options: ProductionOptions,
    ) -> Manifest:
        """Generate every scene image in order, publishing after each one.

        Raises:
            FatalProviderError: Stops the phase immediately
            ImageGenerationError: Not a single image was produced
        """
        backend = ImageBackend(options.image_backend)
        self.image_synthesizer.reference_image_url = request.reference_image_url
        self.job_state.update(
            status=JobStatus.IMAGES_PROCESSING,
            completed_images=0,
            total_images=len(manifest.scenes),
        )
        self.job_state.add_log(f"🎨 Starting image generation ({plan.aspect_ratio.value}) using {backend.value}...")

        scenes: List[Scene] = list(manifest.scenes)
        completed = 0
        for index, scene in enumerate(scenes):
            preview = (scene.visual_description or scene.image_prompt)[:30]
            self.job_state.add_log(f"Painting Scene {index + 1}: \"{preview}...\"")

            url = await self._generate_scene_image(scene, manifest.seed, request, plan, backend, options)
            if url is None:
                continue

            scenes[index] = scene.model_copy(update={
                "generated_image_url": url,
                "generated_image_seed": derive_scene_seed(manifest.seed, scene.scene_number),
            })
            completed += 1
            manifest = manifest.model_copy(update={"scenes": list(scenes)})
            self.job_state.update(manifest=manifest, completed_images=completed)

        if completed == 0:
            raise ImageGenerationError("No images could be generated for this story")
        self.job_state.add_log(f"✅ Visuals generated ({completed}/{len(scenes)}).")
        return manifest

    async def _generate_scene_image(
        self,
        scene: Scene,
        seed: Optional[str],
        request: StoryRequest,
        plan: ProductionPlan,
        backend: ImageBackend,
        options: ProductionOptions,
    ) -> Optional[str]:
        """Image for one scene with exponential backoff; None once attempts run out."""
        attempts = max(1, options.image_max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await self.image_synthesizer.generate(
                    scene,
                    seed,
                    style_tone=request.style_tone,
                    aspect_ratio=plan.aspect_ratio,
                    backend=backend,
                )
            except FatalProviderError:
                raise
            except TransientProviderError as exc:
                logger.warning(
                    f"Scene {scene.scene_number} image attempt {attempt}/{attempts} failed: {exc.message}"
                )
                if attempt < attempts:
                    self.job_state.add_log(f"⚠️ Retrying Scene {scene.scene_number}...")
                    await asyncio.sleep(options.image_retry_base_delay * 2 ** (attempt - 1))

        self.job_state.add_log(f"❌ Failed to generate image for Scene {scene.scene_number} after {attempts} attempts.")
        return None

    async def generate_audio(
        self,
        manifest: Manifest,
        options: ProductionOptions,
    ) -> "tuple[Manifest, Optional[NarrationAudio]]":
        """Narration for the whole manifest; non-fatal failure leaves the video silent."""
        self.job_state.update(status=JobStatus.AUDIO_PROCESSING)
        self.job_state.add_log("🎙️ Synthesizing voiceover narration...")

        try:
            audio = await self.speech_synthesizer.synthesize(manifest, options.voice_override)
        except FatalProviderError:
            raise
        except ShortMakerError as exc:
            logger.warning(f"Narration failed: {exc.message}")
            self.job_state.add_log("⚠️ Audio generation had issues, proceeding with silent video.")
            return manifest, None

        manifest = manifest.model_copy(update={"generated_audio_url": audio.audio_url})
        self.job_state.update(manifest=manifest)
        return manifest, audio

    def _record_failure(self, message: str) -> None:
        if self.job_state.state.status != JobStatus.FAILED:
            self.job_state.fail(message)
        self._checkpoint()

    def _checkpoint(self) -> None:
        """Hand the current manifest to the persist hook (never raises)."""
        manifest = self.job_state.state.manifest
        if self.persist is None or manifest is None:
            return
        try:
            self.persist(manifest)
        except Exception:
            logger.warning("Manifest checkpoint failed", exc_info=True)


__all__ = ["ProductionOptions", "ProductionResult", "ProductionRunner"]
