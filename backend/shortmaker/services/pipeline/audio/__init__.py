"""Narration synthesis and WAV handling."""

from .wav import concat_pcm_to_wav, is_wav, read_sample_count, strip_wav_header, wrap_pcm
from .synthesizer import NarrationAudio, SpeechSynthesizer, estimate_narration_duration

__all__ = [
    "NarrationAudio",
    "SpeechSynthesizer",
    "estimate_narration_duration",
    "concat_pcm_to_wav",
    "is_wav",
    "read_sample_count",
    "strip_wav_header",
    "wrap_pcm",
]
