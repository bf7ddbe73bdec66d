"""
memoscribe.session - Pipeline session with a single busy slot.

A MemoSession runs transcription and note generation for one vault.
Only one run may be active per session: a second entry while busy fails
immediately with AlreadyInProgressError instead of queueing, so two
writers never race on the same note. The slot is released on every
exit path, including backend failures and timeouts.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Iterator
from contextlib import aclosing, contextmanager
from typing import Any

from memoscribe.exceptions import AlreadyInProgressError, GenerationError
from memoscribe.llm.client import Generator
from memoscribe.llm.prompt import build_prompt
from memoscribe.logging import logger
from memoscribe.notes.buffer import DocumentBuffer
from memoscribe.notes.writer import StreamingNoteWriter, StreamState
from memoscribe.transcribe.backend import Transcriber
from memoscribe.transcribe.orchestrator import transcribe_audio


class MemoSession:
    """Runs audio → transcript → streamed note for one vault."""

    def __init__(
        self,
        config: Any,
        transcriber: Transcriber,
        generator: Generator,
        on_progress: Callable[[str], None] | None = None,
    ) -> None:
        self.config = config
        self.transcriber = transcriber
        self.generator = generator
        self.on_progress = on_progress
        self.writer = StreamingNoteWriter()
        self.transcript = ""
        self._busy = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    @contextmanager
    def _claim(self) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            raise AlreadyInProgressError()
        try:
            yield
        finally:
            self._busy.release()

    def _notify(self, message: str) -> None:
        logger.info(message)
        if self.on_progress:
            self.on_progress(message)

    async def transcribe_file(self, data: bytes, file_type: str | None) -> str:
        """Transcribe an audio buffer."""
        with self._claim():
            return await self._transcribe(data, file_type)

    async def generate_note(
        self,
        transcript: str,
        buffer: DocumentBuffer,
        start_line: int,
    ) -> StreamState:
        """Stream generated notes for a transcript into buffer."""
        with self._claim():
            return await self._generate(transcript, buffer, start_line)

    async def process_audio(
        self,
        data: bytes,
        file_type: str | None,
        buffer: DocumentBuffer,
        start_line: int,
    ) -> str:
        """Transcribe audio and stream the generated notes into buffer.

        Returns:
            The transcript
        """
        with self._claim():
            self._notify("Generating transcript...")
            transcript = await self._transcribe(data, file_type)
            self._notify("Transcript generated...")
            await self._generate(transcript, buffer, start_line)
            return transcript

    async def _transcribe(self, data: bytes, file_type: str | None) -> str:
        transcript = await transcribe_audio(
            data,
            file_type,
            self.transcriber,
            self.config,
            on_progress=self.on_progress,
        )
        self.transcript = transcript
        return transcript

    async def _generate(
        self,
        transcript: str,
        buffer: DocumentBuffer,
        start_line: int,
    ) -> StreamState:
        prompt = build_prompt(self.config.prompt, transcript)
        trailer = transcript if self.config.include_transcript else None
        start_line = max(0, min(start_line, buffer.last_line()))

        self._notify("Performing customized superhuman analysis...")

        timeout = self.config.generation_timeout_seconds
        try:
            async with aclosing(self.generator.stream(prompt, self.config.model)) as events:
                return await asyncio.wait_for(
                    self.writer.consume(events, buffer, start_line, trailer),
                    timeout=timeout,
                )
        except asyncio.TimeoutError as e:
            raise GenerationError(f"Note generation timed out after {timeout:.0f}s") from e
        finally:
            self.writer.abort()
