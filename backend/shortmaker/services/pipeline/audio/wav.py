"""WAV container helpers (16-bit linear PCM, canonical 44-byte header)."""

from __future__ import annotations

import io
import wave
from typing import Iterable

from shortmaker.config.constants import (
    PCM_CHANNELS,
    PCM_SAMPLE_RATE,
    PCM_SAMPLE_WIDTH,
    WAV_HEADER_SIZE,
)


def is_wav(blob: bytes) -> bool:
    return len(blob) >= 12 and blob[:4] == b"RIFF" and blob[8:12] == b"WAVE"


def wrap_pcm(
    pcm: bytes,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    sample_width: int = PCM_SAMPLE_WIDTH,
) -> bytes:
    """Prefix raw PCM samples with a WAV header describing them."""
    frame_size = sample_width * max(1, channels)
    usable = len(pcm) - (len(pcm) % frame_size)
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wavf:
        wavf.setnchannels(max(1, channels))
        wavf.setsampwidth(sample_width)
        wavf.setframerate(sample_rate)
        wavf.writeframes(pcm[:usable])
    return buffer.getvalue()


def strip_wav_header(blob: bytes) -> bytes:
    """Return the raw samples of a WAV blob.

    Non-WAV input is assumed to already be raw PCM and is returned as is.
    """
    if not is_wav(blob):
        return blob
    try:
        with wave.open(io.BytesIO(blob), "rb") as wavf:
            return wavf.readframes(wavf.getnframes())
    except (wave.Error, EOFError):
        return blob[WAV_HEADER_SIZE:]


def concat_pcm_to_wav(segments: Iterable[bytes]) -> bytes:
    """Strip each segment's header, join the samples in order, re-wrap once.

    Every segment is cut to whole frames so a stray byte cannot shift the
    samples that follow it.
    """
    frame_size = PCM_SAMPLE_WIDTH * max(1, PCM_CHANNELS)
    samples = []
    for segment in segments:
        pcm = strip_wav_header(segment)
        samples.append(pcm[:len(pcm) - len(pcm) % frame_size])
    return wrap_pcm(b"".join(samples))


def read_sample_count(blob: bytes) -> int:
    """Number of frames declared by a WAV blob's header."""
    with wave.open(io.BytesIO(blob), "rb") as wavf:
        return wavf.getnframes()


__all__ = [
    "is_wav",
    "wrap_pcm",
    "strip_wav_header",
    "concat_pcm_to_wav",
    "read_sample_count",
]
