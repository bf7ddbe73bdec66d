"""
memoscribe.audio.resample - Sample rate conversion.

Whisper-style services expect 16 kHz input; downsampling before
encoding keeps each chunk well under the upload cap.
"""

from __future__ import annotations

import librosa

from memoscribe.audio.signal import Signal
from memoscribe.exceptions import DecodeError


def resampled_length(frames: int, source_rate: int, target_rate: int) -> int:
    """Number of frames a signal has after conversion to target_rate."""
    return round(frames * target_rate / source_rate)


def resample(signal: Signal, target_rate: int) -> Signal:
    """Resample every channel of a signal to target_rate.

    librosa's soxr resampler band-limits the input, so content above the
    target Nyquist frequency is filtered out instead of aliased. The
    output is trimmed or padded to exactly round(frames * target / source)
    frames.

    Raises:
        DecodeError: If the signal has no channels or no frames
    """
    if signal.channels == 0:
        raise DecodeError("Audio has no channels")
    if signal.frames <= 0:
        raise DecodeError("Audio has no duration")
    if target_rate <= 0:
        raise ValueError(f"Target sample rate must be positive, got {target_rate}")

    size = resampled_length(signal.frames, signal.sample_rate, target_rate)
    if target_rate == signal.sample_rate:
        return Signal(samples=signal.samples, sample_rate=target_rate)

    samples = librosa.resample(
        signal.samples,
        orig_sr=signal.sample_rate,
        target_sr=target_rate,
        res_type="soxr_hq",
        axis=-1,
    )
    samples = librosa.util.fix_length(samples, size=size, axis=-1)

    return Signal(samples=samples, sample_rate=target_rate)
