"""
memoscribe.audio.chunker - Split a signal into bounded-duration chunks.

Chunks tile the source signal exactly: chunk 0 starts at frame 0 and
every following chunk starts where the previous one ended. Transcript
reassembly relies on this.
"""

from __future__ import annotations

import math

from memoscribe.audio.signal import Chunk, Signal


def frames_per_chunk(max_duration: float, sample_rate: int) -> int:
    """Maximum frame count of a chunk at the given rate."""
    return math.floor(max_duration * sample_rate)


def split_signal(signal: Signal, max_duration: float) -> list[Chunk]:
    """Split a signal into chunks of at most max_duration seconds.

    Args:
        signal: Source signal
        max_duration: Maximum chunk duration in seconds

    Returns:
        Ordered chunks; empty for a zero-length signal
    """
    limit = frames_per_chunk(max_duration, signal.sample_rate)
    if limit < 1:
        raise ValueError(
            f"Chunk duration {max_duration}s is shorter than one frame at {signal.sample_rate} Hz"
        )

    chunks: list[Chunk] = []
    offset = 0
    while offset < signal.frames:
        size = min(limit, signal.frames - offset)
        view = signal.samples[:, offset : offset + size]
        chunks.append(
            Chunk(
                index=len(chunks),
                start_frame=offset,
                signal=Signal(samples=view, sample_rate=signal.sample_rate),
            )
        )
        offset += size

    return chunks
