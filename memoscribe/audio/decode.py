"""
memoscribe.audio.decode - Audio decoding.

Decodes a recorded audio buffer into a Signal. Containers libsndfile
understands are read from memory with soundfile; compressed formats
(mp3, m4a, webm, ...) go through librosa.load on a temporary file so
its audioread/FFmpeg fallback can pick the codec from the suffix.
"""

from __future__ import annotations

import io
import os
import tempfile

import numpy as np

from memoscribe.audio.signal import Signal
from memoscribe.exceptions import DecodeError
from memoscribe.logging import logger

AUDIO_EXTENSIONS = ("mp3", "mp4", "mpeg", "mpga", "m4a", "wav", "webm")

_SOUNDFILE_FORMATS = {"wav", "flac", "ogg", "aiff", "aif"}


def decode_audio(data: bytes, file_type: str | None = None) -> Signal:
    """Decode an audio byte buffer.

    Args:
        data: Raw file contents
        file_type: Container hint, usually the file extension ("wav", "mp3")

    Returns:
        Decoded Signal at the file's native sample rate

    Raises:
        DecodeError: If the buffer is empty or cannot be decoded
    """
    if not data:
        raise DecodeError("Audio buffer is empty")

    hint = (file_type or "").lower().lstrip(".")

    try:
        if hint in _SOUNDFILE_FORMATS or not hint:
            signal = _decode_soundfile(data)
        else:
            signal = _decode_librosa(data, hint)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Could not decode {hint or 'audio'} data: {e}") from e

    logger.debug(
        "Decoded %s audio: %d channel(s), %d Hz, %d frames",
        hint or "unknown",
        signal.channels,
        signal.sample_rate,
        signal.frames,
    )
    return signal


def _decode_soundfile(data: bytes) -> Signal:
    """Decode with soundfile from memory."""
    import soundfile as sf

    samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    return Signal(samples=samples.T, sample_rate=int(sample_rate))


def _decode_librosa(data: bytes, hint: str) -> Signal:
    """Decode with librosa via a temporary file carrying the hinted suffix."""
    import librosa

    fd, tmp_name = tempfile.mkstemp(suffix=f".{hint}")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        samples, sample_rate = librosa.load(tmp_name, sr=None, mono=False)
    finally:
        os.unlink(tmp_name)

    return Signal(samples=np.atleast_2d(samples), sample_rate=int(sample_rate))
