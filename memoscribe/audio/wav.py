"""
memoscribe.audio.wav - Canonical 16-bit PCM WAV encoding.

Writes the 44-byte RIFF/WAVE header followed by little-endian int16
samples interleaved per frame (frame 0 channel 0, frame 0 channel 1, ...).
"""

from __future__ import annotations

import struct

import numpy as np

from memoscribe.audio.signal import Chunk, Signal
from memoscribe.exceptions import EncodingTooLargeError

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
WAVE_FORMAT_PCM = 1

# 25 MB service limit, minus margin
MAX_WAV_BYTES = 24 * 1024 * 1024

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def encoded_size(signal: Signal | Chunk) -> int:
    """Byte length of the WAV encoding of a signal or chunk."""
    return HEADER_SIZE + signal.frames * signal.channels * BYTES_PER_SAMPLE


def wav_header(channels: int, sample_rate: int, frames: int) -> bytes:
    """Build the canonical 44-byte PCM header."""
    data_bytes = frames * channels * BYTES_PER_SAMPLE
    block_align = channels * BYTES_PER_SAMPLE
    return _HEADER.pack(
        b"RIFF",
        36 + data_bytes,
        b"WAVE",
        b"fmt ",
        16,
        WAVE_FORMAT_PCM,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_bytes,
    )


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Convert float samples in [-1, 1] to int16.

    Negative values scale by 32768 and non-negative values by 32767, so
    both ends of the range map onto the int16 limits.
    """
    clipped = np.clip(samples.astype(np.float64), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 32768.0, clipped * 32767.0)
    return np.rint(scaled).astype("<i2")


def encode_wav(audio: Signal | Chunk, max_bytes: int | None = MAX_WAV_BYTES) -> bytes:
    """Encode a signal or chunk as a WAV byte buffer.

    Args:
        audio: Signal or Chunk to encode
        max_bytes: Size cap; None disables the check

    Returns:
        WAV file contents

    Raises:
        EncodingTooLargeError: If the encoding would exceed max_bytes
    """
    signal = audio.signal if isinstance(audio, Chunk) else audio

    size = encoded_size(signal)
    if max_bytes is not None and size > max_bytes:
        raise EncodingTooLargeError(size, max_bytes)

    header = wav_header(signal.channels, signal.sample_rate, signal.frames)
    # (channels, frames) -> (frames, channels) row-major gives frame-interleaved order
    pcm = to_pcm16(signal.samples).T
    return header + np.ascontiguousarray(pcm).tobytes()
