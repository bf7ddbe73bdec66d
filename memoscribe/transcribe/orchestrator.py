"""
memoscribe.transcribe.orchestrator - Chunked transcription.

Runs the audio pipeline (decode, resample, chunk) and submits the WAV
encoded chunks one at a time, pausing between requests to stay inside
the service's rate limits. Fragments are joined in chunk order.

Any failing chunk aborts the whole run: fragments already received are
dropped and no partial transcript is returned.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

from memoscribe.audio.chunker import split_signal
from memoscribe.audio.decode import decode_audio
from memoscribe.audio.resample import resample
from memoscribe.audio.signal import Chunk
from memoscribe.audio.wav import MAX_WAV_BYTES, encode_wav, encoded_size
from memoscribe.exceptions import (
    EncodingTooLargeError,
    NoAudioError,
    TranscriptionBackendError,
    TranscriptionError,
)
from memoscribe.logging import logger
from memoscribe.transcribe.backend import Transcriber

ProgressCallback = Callable[[str], None]


async def transcribe_chunks(
    chunks: Sequence[Chunk],
    backend: Transcriber,
    model: str = "whisper-1",
    *,
    request_delay: float = 1.0,
    max_bytes: int = MAX_WAV_BYTES,
    on_progress: ProgressCallback | None = None,
) -> str:
    """Transcribe chunks sequentially and join the fragments.

    Args:
        chunks: Chunks in index order
        backend: Transcription backend
        model: Transcription model identifier
        request_delay: Seconds to wait between submissions
        max_bytes: Encoded size cap per chunk
        on_progress: Optional callback receiving progress messages

    Returns:
        Fragments joined with single spaces, in chunk order

    Raises:
        NoAudioError: If there are no chunks
        EncodingTooLargeError: If any chunk exceeds max_bytes (checked
            before the first request)
        TranscriptionError: If any chunk fails
    """
    if not chunks:
        raise NoAudioError("No audio to transcribe.")

    for chunk in chunks:
        size = encoded_size(chunk)
        if size > max_bytes:
            raise EncodingTooLargeError(size, max_bytes)

    total = len(chunks)
    fragments: list[str] = []

    for position, chunk in enumerate(sorted(chunks, key=lambda c: c.index)):
        if position > 0:
            await asyncio.sleep(request_delay)

        message = f"Transcribing chunk {position + 1} of {total}"
        logger.info(message)
        if on_progress:
            on_progress(message)

        wav = encode_wav(chunk, max_bytes=max_bytes)

        try:
            text = await backend.submit(wav, model)
        except TranscriptionError:
            raise
        except Exception as e:
            raise TranscriptionBackendError(f"Error: {e}") from e

        logger.debug("Chunk %d returned %d characters", chunk.index, len(text))
        fragments.append(text.strip())

    return " ".join(fragments)


async def transcribe_audio(
    data: bytes,
    file_type: str | None,
    backend: Transcriber,
    config: Any,
    on_progress: ProgressCallback | None = None,
) -> str:
    """Decode, resample, chunk and transcribe an audio buffer.

    Args:
        data: Raw audio file contents
        file_type: Container hint (file extension)
        backend: Transcription backend
        config: MemoConfig instance
        on_progress: Optional callback receiving progress messages

    Returns:
        Full transcript

    Raises:
        AuthError: If the backend has no usable credential
        DecodeError: If the audio cannot be decoded
        NoAudioError: If the decoded audio is empty
        EncodingTooLargeError: If a chunk exceeds the size cap
        TranscriptionError: If the backend fails
    """
    backend.check_credentials()

    signal = decode_audio(data, file_type)
    if signal.frames == 0:
        raise NoAudioError("No audio was recorded.")

    signal = resample(signal, config.target_sample_rate)
    chunks = split_signal(signal, config.chunk_duration_seconds)
    logger.debug(
        "Split %.1fs of audio into %d chunk(s) of up to %.0fs",
        signal.duration,
        len(chunks),
        config.chunk_duration_seconds,
    )

    return await transcribe_chunks(
        chunks,
        backend,
        config.transcription_model,
        request_delay=config.request_delay_seconds,
        max_bytes=config.max_chunk_bytes,
        on_progress=on_progress,
    )
