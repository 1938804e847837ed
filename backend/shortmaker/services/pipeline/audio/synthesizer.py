"""
Speech Synthesizer + Audio Assembler

Narration is synthesized per scene in concurrency-bounded batches. Each
result is a WAV blob; headers are stripped, raw samples concatenated in
scene order and re-wrapped once into a single narration track.

Best-effort policy: a scene whose synthesis keeps failing transiently is
dropped from the track. Fatal provider errors are never swallowed: the
in-flight batch is allowed to settle and the error is re-raised.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from shortmaker.config.constants import (
    DEFAULT_VOICE,
    PCM_SAMPLE_RATE,
    TTS_BATCH_PAUSE,
    TTS_CALL_TIMEOUT,
    TTS_MAX_ATTEMPTS,
    TTS_MAX_CONCURRENT,
    TTS_RETRY_DELAY,
    WORDS_PER_SECOND,
)
from shortmaker.core import (
    AudioSynthesisError,
    FatalProviderError,
    LogTimer,
    MalformedOutputError,
    TransientProviderError,
    encode_data_uri,
    get_logger,
    with_timeout,
)
from shortmaker.models.manifest import Manifest, Scene
from shortmaker.services.infrastructure.orchestration.job_state import JobStateBroadcaster
from shortmaker.services.providers.base import SpeechProvider

from .wav import concat_pcm_to_wav, read_sample_count, strip_wav_header

logger = get_logger(__name__, component="speech_synthesizer")


@dataclass
class NarrationAudio:
    """Combined narration track"""
    audio_url: str
    duration: float
    estimated_duration: float
    segment_count: int
    sample_count: int
    failed_scenes: List[int] = field(default_factory=list)


def estimate_narration_duration(scenes: List[Scene]) -> float:
    """Seconds of speech estimated from whitespace-separated word count."""
    words = sum(len(scene.narration_text.split()) for scene in scenes)
    return words / WORDS_PER_SECOND


class SpeechSynthesizer:
    """Turns a manifest's narration into one WAV track."""

    def __init__(
        self,
        provider: SpeechProvider,
        job_state: Optional[JobStateBroadcaster] = None,
        output_dir: Optional[Path] = None,
        max_concurrent: int = TTS_MAX_CONCURRENT,
        batch_pause: float = TTS_BATCH_PAUSE,
        call_timeout: float = TTS_CALL_TIMEOUT,
        max_attempts: int = TTS_MAX_ATTEMPTS,
        retry_delay: float = TTS_RETRY_DELAY,
    ):
        self.provider = provider
        self.job_state = job_state
        self.output_dir = Path(output_dir) if output_dir else None
        self.max_concurrent = max(1, max_concurrent)
        self.batch_pause = batch_pause
        self.call_timeout = call_timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay

    def resolve_voice(self, manifest: Manifest, voice_override: Optional[str] = None) -> str:
        return voice_override or manifest.voice_instruction.voice or DEFAULT_VOICE

    async def synthesize(self, manifest: Manifest, voice_override: Optional[str] = None) -> NarrationAudio:
        """
        Synthesize and assemble the narration for every scene.

        Args:
            manifest: Manifest whose scenes carry narration text
            voice_override: Voice id taking precedence over the manifest

        Returns:
            NarrationAudio describing the combined track

        Raises:
            FatalProviderError: Configuration / quota / permission problem
            AudioSynthesisError: No scene produced any audio
        """
        voice = self.resolve_voice(manifest, voice_override)
        scenes = [scene for scene in manifest.scenes if scene.narration_text.strip()]
        skipped = len(manifest.scenes) - len(scenes)
        if skipped:
            logger.info(f"Skipping {skipped} scenes without narration")

        segments: List[bytes] = []
        failed: List[int] = []

        with LogTimer(logger, f"narration for {len(scenes)} scenes (voice {voice})"):
            for batch_start in range(0, len(scenes), self.max_concurrent):
                batch = scenes[batch_start:batch_start + self.max_concurrent]
                results = await asyncio.gather(
                    *(self._synthesize_scene(scene, voice) for scene in batch),
                    return_exceptions=True,
                )

                fatal: Optional[FatalProviderError] = None
                for scene, result in zip(batch, results):
                    if isinstance(result, FatalProviderError):
                        fatal = fatal or result
                    elif isinstance(result, BaseException):
                        if not isinstance(result, Exception):
                            raise result
                        failed.append(scene.scene_number)
                        logger.warning(
                            f"Narration dropped for scene {scene.scene_number}: {result}",
                            extra={"error_type": type(result).__name__},
                        )
                    else:
                        segments.append(result)

                if fatal is not None:
                    if self.job_state is not None:
                        self.job_state.fail(fatal.message)
                    raise fatal

                if batch_start + self.max_concurrent < len(scenes):
                    await asyncio.sleep(self.batch_pause)

        if not segments:
            raise AudioSynthesisError("Narration synthesis failed for every scene")

        wav = concat_pcm_to_wav(segments)
        sample_count = read_sample_count(wav)
        estimated = estimate_narration_duration(scenes)
        duration = sample_count / PCM_SAMPLE_RATE if sample_count else estimated

        audio = NarrationAudio(
            audio_url=self._store(wav),
            duration=duration,
            estimated_duration=estimated,
            segment_count=len(segments),
            sample_count=sample_count,
            failed_scenes=failed,
        )
        if self.job_state is not None:
            note = f", {len(failed)} scenes without narration" if failed else ""
            self.job_state.add_log(f"✅ Audio created ({round(audio.duration)}s{note}).")
        return audio

    async def _synthesize_scene(self, scene: Scene, voice: str) -> bytes:
        """One scene, retrying transient failures; returns the WAV blob."""
        attempt = 1
        while True:
            try:
                blob = await with_timeout(
                    self.provider.synthesize_speech(scene.narration_text, voice),
                    self.call_timeout,
                    f"Speech synthesis for scene {scene.scene_number}",
                    provider=getattr(self.provider, "name", None),
                )
                if not blob or not strip_wav_header(blob):
                    raise MalformedOutputError(f"Empty audio for scene {scene.scene_number}")
                return blob
            except TransientProviderError as exc:
                if attempt >= self.max_attempts:
                    raise
                logger.debug(f"Scene {scene.scene_number} TTS attempt {attempt} failed: {exc.message}")
                await asyncio.sleep(self.retry_delay * attempt)
                attempt += 1

    def _store(self, wav: bytes) -> str:
        if self.output_dir is None:
            return encode_data_uri(wav, "audio/wav")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / "narration.wav"
        path.write_bytes(wav)
        return str(path)


__all__ = ["NarrationAudio", "SpeechSynthesizer", "estimate_narration_duration"]
