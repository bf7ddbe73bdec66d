"""
memoscribe.audio.signal - Decoded audio containers.

Signals store samples as a float32 array of shape (channels, frames),
the layout librosa uses for multichannel audio.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Signal:
    """Decoded multi-channel audio with its sample rate."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        samples = np.asarray(self.samples, dtype=np.float32).view()
        if samples.ndim == 1:
            samples = samples[np.newaxis, :]
        if samples.ndim != 2:
            raise ValueError(f"Expected (channels, frames) samples, got shape {samples.shape}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    @property
    def channels(self) -> int:
        return self.samples.shape[0]

    @property
    def frames(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate


@dataclass(frozen=True)
class Chunk:
    """A contiguous frame range of a Signal, submitted as one transcription unit."""

    index: int
    start_frame: int
    signal: Signal

    @property
    def frames(self) -> int:
        return self.signal.frames

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.frames

    @property
    def channels(self) -> int:
        return self.signal.channels

    @property
    def sample_rate(self) -> int:
        return self.signal.sample_rate
