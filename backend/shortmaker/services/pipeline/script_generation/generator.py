"""
Script Generator - idea to scene-by-scene manifest

Short durations are written with one provider call. Long durations are
written in sequential batches: each batch carries a continuity hint, is
renumbered by global position, merged into the running manifest and
published to the Job State before a cooldown pause.

Failure policy:
    - Fatal provider errors (credentials, quota, permission, referrer) stop
      the run at once. Scenes already published stay in the Job State.
    - Transient errors are retried per batch with a growing delay. When one
      batch exhausts its retries the loop stops early and keeps what exists.
    - A single-call script with fewer scenes than asked for is retried. A
      short batch is kept and the shortfall is requested by extra batches,
      at most ``max_attempts`` of them.
    - Zero scenes overall is a ``ScriptGenerationError``.
"""

import asyncio
import math
import uuid
from typing import List, Optional

from pydantic import ValidationError

from shortmaker.config.constants import (
    SCRIPT_BATCH_COOLDOWN,
    SCRIPT_BATCH_SIZE,
    SCRIPT_CALL_TIMEOUT,
    SCRIPT_MAX_ATTEMPTS,
    SCRIPT_MAX_OUTPUT_TOKENS,
    SCRIPT_RETRY_DELAY,
    SCRIPT_TEMPERATURE,
    SINGLE_CALL_SCENE_LIMIT,
)
from shortmaker.core import (
    FatalProviderError,
    LogTimer,
    MalformedOutputError,
    ScriptGenerationError,
    TransientProviderError,
    get_logger,
    with_timeout,
)
from shortmaker.models.generation import ProductionPlan, StoryRequest, resolve_plan
from shortmaker.models.manifest import Manifest, Scene
from shortmaker.models.status import JobStatus, ManifestStatus
from shortmaker.services.infrastructure.orchestration.job_state import JobStateBroadcaster
from shortmaker.services.infrastructure.parsing.json_parser import parse_provider_json
from shortmaker.services.providers.base import TextGenerationConfig, TextProvider

from .prompts import (
    SCRIPT_SCHEMA_HINT,
    START_HINT,
    build_system_instruction,
    build_user_prompt,
    continuation_hint,
)

logger = get_logger(__name__, component="script_generator")


def renumber_scenes(scenes: List[Scene], offset: int = 0) -> List[Scene]:
    """Copy ``scenes`` with ``scene_number`` derived from position (1-based + offset)."""
    return [
        scene.model_copy(update={"scene_number": offset + index})
        for index, scene in enumerate(scenes, start=1)
    ]


class ScriptGenerator:
    """Writes a manifest for a ``StoryRequest`` and publishes progress."""

    def __init__(
        self,
        provider: TextProvider,
        job_state: JobStateBroadcaster,
        batch_size: int = SCRIPT_BATCH_SIZE,
        single_call_limit: int = SINGLE_CALL_SCENE_LIMIT,
        batch_cooldown: float = SCRIPT_BATCH_COOLDOWN,
        max_attempts: int = SCRIPT_MAX_ATTEMPTS,
        retry_delay: float = SCRIPT_RETRY_DELAY,
        call_timeout: float = SCRIPT_CALL_TIMEOUT,
    ):
        self.provider = provider
        self.job_state = job_state
        self.batch_size = max(1, batch_size)
        self.single_call_limit = single_call_limit
        self.batch_cooldown = batch_cooldown
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.call_timeout = call_timeout
        self.text_config = TextGenerationConfig(
            temperature=SCRIPT_TEMPERATURE,
            max_output_tokens=SCRIPT_MAX_OUTPUT_TOKENS,
        )

    async def generate(self, request: StoryRequest, plan: Optional[ProductionPlan] = None) -> Manifest:
        """
        Produce the complete manifest for ``request``.

        Args:
            request: Idea plus mode, duration tier and style hints
            plan: Already resolved plan; resolved from ``request`` when omitted

        Returns:
            Manifest with contiguous scene numbers and the resolved resolution

        Raises:
            FatalProviderError: Provider configuration / quota / access problem
            ScriptGenerationError: No scene could be produced
        """
        plan = plan or resolve_plan(request)
        seed = request.seed or uuid.uuid4().hex[:8]

        self.job_state.update(status=JobStatus.GENERATING_SCRIPT, error=None)
        self.job_state.add_log(
            f"📝 Writing script: {plan.scene_count} scenes "
            f"({request.duration_tier}, {plan.aspect_ratio.value})"
        )

        with LogTimer(logger, f"script generation ({plan.scene_count} scenes)"):
            if plan.scene_count <= self.single_call_limit:
                manifest = await self._generate_single(request, plan, seed)
            else:
                manifest = await self._generate_batched(request, plan, seed)

        manifest = manifest.model_copy(update={"status": ManifestStatus.STORY_READY})
        self.job_state.update(status=JobStatus.STORY_READY, manifest=manifest)
        self.job_state.add_log(f"✅ Script ready: \"{manifest.title}\" with {len(manifest.scenes)} scenes")
        return manifest

    async def _generate_single(self, request: StoryRequest, plan: ProductionPlan, seed: str) -> Manifest:
        try:
            batch = await self._request_with_retry(
                request, plan, plan.scene_count, 1, START_HINT, batch_label="Script", require_full=True
            )
        except (FatalProviderError, ScriptGenerationError) as exc:
            self.job_state.fail(exc.message)
            raise

        return self._assemble(batch, renumber_scenes(batch.scenes), request, plan, seed)

    async def _generate_batched(self, request: StoryRequest, plan: ProductionPlan, seed: str) -> Manifest:
        total_batches = math.ceil(plan.scene_count / self.batch_size)
        # Short batches are topped up by a bounded number of extra requests
        max_batches = total_batches + self.max_attempts
        scenes: List[Scene] = []
        base: Optional[Manifest] = None

        logger.info(
            f"Long-form script: {total_batches} batches of {self.batch_size}",
            extra={"scene_count": plan.scene_count, "batches": total_batches},
        )

        for batch_index in range(max_batches):
            remaining = plan.scene_count - len(scenes)
            if remaining <= 0:
                break
            count = min(self.batch_size, remaining)
            start = len(scenes) + 1
            continuity = START_HINT if not scenes else continuation_hint(scenes[-1].narration_text)
            if batch_index < total_batches:
                label = f"Batch {batch_index + 1}/{total_batches}"
            else:
                label = f"Top-up batch {batch_index - total_batches + 1}"

            try:
                batch = await self._request_with_retry(request, plan, count, start, continuity, batch_label=label)
            except FatalProviderError as exc:
                # Published scenes stay in the job state
                self.job_state.fail(exc.message)
                raise
            except ScriptGenerationError as exc:
                self.job_state.add_log(f"⚠️ {exc.message}. Keeping {len(scenes)} scenes.")
                break

            if base is None:
                base = batch
            if len(batch.scenes) < count:
                logger.warning(
                    f"{label} returned {len(batch.scenes)}/{count} scenes",
                    extra={"requested": count, "received": len(batch.scenes)},
                )
            scenes.extend(renumber_scenes(batch.scenes, offset=len(scenes)))
            self.job_state.update(manifest=self._assemble(base, scenes, request, plan, seed))
            self.job_state.add_log(f"📚 {label}: {len(scenes)}/{plan.scene_count} scenes")

            if batch_index < max_batches - 1 and len(scenes) < plan.scene_count:
                await asyncio.sleep(self.batch_cooldown)

        if base is None or not scenes:
            message = "Script generation failed: no scenes were produced"
            self.job_state.fail(message)
            raise ScriptGenerationError(message)

        if len(scenes) < plan.scene_count:
            logger.warning(
                f"Script stopped early with {len(scenes)}/{plan.scene_count} scenes",
                extra={"scene_count": len(scenes)},
            )
        return self._assemble(base, scenes, request, plan, seed)

    async def _request_with_retry(
        self,
        request: StoryRequest,
        plan: ProductionPlan,
        count: int,
        start: int,
        continuity: str,
        batch_label: str,
        require_full: bool = False,
    ) -> Manifest:
        """Request one batch, retrying transient failures.

        With ``require_full`` a batch holding fewer than ``count`` scenes is
        treated as malformed and retried.

        Raises:
            FatalProviderError: Immediately, never retried
            ScriptGenerationError: Retries exhausted
        """
        last_error: Optional[TransientProviderError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._request_batch(request, plan, count, start, continuity, require_full)
            except FatalProviderError:
                raise
            except TransientProviderError as exc:
                last_error = exc
                logger.warning(
                    f"{batch_label} attempt {attempt}/{self.max_attempts} failed: {exc.message}",
                    extra={"attempt": attempt, "error_type": type(exc).__name__},
                )
                if attempt < self.max_attempts:
                    self.job_state.add_log(f"🔁 {batch_label} failed ({exc.message}), retrying...")
                    await asyncio.sleep(self.retry_delay * attempt)

        raise ScriptGenerationError(
            f"{batch_label} failed after {self.max_attempts} attempts: {last_error.message}"
        ) from last_error

    async def _request_batch(
        self,
        request: StoryRequest,
        plan: ProductionPlan,
        count: int,
        start: int,
        continuity: str,
        require_full: bool = False,
    ) -> Manifest:
        raw_text = await with_timeout(
            self.provider.generate_text(
                build_user_prompt(request, plan),
                system_instruction=build_system_instruction(count, start, continuity, request.script_style),
                schema_hint=SCRIPT_SCHEMA_HINT,
                config=self.text_config,
            ),
            self.call_timeout,
            "Script generation",
            provider=getattr(self.provider, "name", None),
        )
        data = parse_provider_json(raw_text)

        try:
            manifest = Manifest.model_validate(data)
        except ValidationError as exc:
            raise MalformedOutputError(f"Script does not match the manifest shape: {exc.error_count()} errors") from exc

        if not manifest.scenes:
            raise MalformedOutputError("Script response contained no scenes")
        if require_full and len(manifest.scenes) < count:
            raise MalformedOutputError(f"Script returned {len(manifest.scenes)} of {count} scenes")
        if len(manifest.scenes) > count:
            logger.debug(f"Dropping {len(manifest.scenes) - count} extra scenes")
            manifest = manifest.model_copy(update={"scenes": manifest.scenes[:count]})
        return manifest

    @staticmethod
    def _assemble(
        base: Manifest,
        scenes: List[Scene],
        request: StoryRequest,
        plan: ProductionPlan,
        seed: str,
    ) -> Manifest:
        """Merge scenes into the first batch's metadata and pin resolved values."""
        voice_instruction = base.voice_instruction
        if request.voice_preference:
            voice_instruction = voice_instruction.model_copy(update={"voice": request.voice_preference})

        return base.model_copy(update={
            "scenes": list(scenes),
            "seed": seed,
            "idea_input": request.idea,
            "voice_instruction": voice_instruction,
            # The provider's stated resolution is advisory only
            "output_settings": base.output_settings.model_copy(update={"video_resolution": plan.resolution}),
        })


__all__ = ["ScriptGenerator", "renumber_scenes"]
