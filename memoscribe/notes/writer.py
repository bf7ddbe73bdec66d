"""
memoscribe.notes.writer - Streaming note writer.

A line-cursor state machine that appends completion tokens to a
DocumentBuffer as they arrive:

    IDLE --start--> STREAMING --write--> STREAMING --finish--> FINALIZING --> IDLE

Writing always starts on the first blank line at or after the requested
line, so existing note content is never overwritten. Only one session
may stream at a time.
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from dataclasses import dataclass
from enum import Enum

from memoscribe.exceptions import AlreadyInProgressError
from memoscribe.llm.client import StreamEvent, StreamKind
from memoscribe.logging import logger
from memoscribe.notes.buffer import DocumentBuffer

TRANSCRIPT_HEADING = "# Transcript"


class WriterState(str, Enum):
    IDLE = "IDLE"
    STREAMING = "STREAMING"
    FINALIZING = "FINALIZING"


@dataclass
class StreamState:
    anchor_line: int
    current_line: int
    finished: bool = False


def next_writable_line(buffer: DocumentBuffer, line: int) -> int:
    """Find the first blank line at or after line.

    Non-blank lines are skipped. When the scan reaches the last line
    while it is still non-blank, a newline is appended to it so the
    buffer grows by one blank line.
    """
    current = line
    while buffer.get_line(current).strip():
        if current == buffer.last_line():
            buffer.set_line(current, buffer.get_line(current) + "\n")
        current += 1
    return current


class StreamingNoteWriter:
    """Appends streamed tokens into a document buffer."""

    def __init__(self) -> None:
        self._state = WriterState.IDLE
        self._stream: StreamState | None = None
        self._buffer: DocumentBuffer | None = None

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def stream_state(self) -> StreamState | None:
        return self._stream

    def start(self, buffer: DocumentBuffer, start_line: int) -> StreamState:
        """Begin a session at the first writable line at or after start_line.

        Raises:
            AlreadyInProgressError: If a session is already active
        """
        if self._state != WriterState.IDLE:
            raise AlreadyInProgressError()

        line = next_writable_line(buffer, start_line)
        self._buffer = buffer
        self._stream = StreamState(anchor_line=line, current_line=line)
        self._state = WriterState.STREAMING
        logger.debug("Streaming into line %d", line)
        return self._stream

    def write(self, token: str) -> None:
        """Append a token to the current line."""
        stream, buffer = self._active()
        buffer.set_line(stream.current_line, buffer.get_line(stream.current_line) + token)
        if "\n" in token:
            stream.current_line = next_writable_line(buffer, stream.current_line)

    def finish(self, transcript: str | None = None) -> StreamState:
        """Close the session, appending a transcript block when given.

        The transcript goes on the first writable line after the anchor,
        i.e. after everything written in this session.
        """
        stream, buffer = self._active()
        self._state = WriterState.FINALIZING
        try:
            line = next_writable_line(buffer, stream.anchor_line)
            if transcript is not None:
                buffer.set_line(
                    line,
                    buffer.get_line(line) + f"\n{TRANSCRIPT_HEADING}\n" + transcript,
                )
            stream.current_line = line
            stream.finished = True
            return stream
        finally:
            self._reset()

    def abort(self) -> None:
        """Drop the active session, if any."""
        if self._state != WriterState.IDLE:
            logger.debug("Aborting streaming session")
        self._reset()

    async def consume(
        self,
        events: AsyncIterable[StreamEvent],
        buffer: DocumentBuffer,
        start_line: int,
        transcript: str | None = None,
    ) -> StreamState:
        """Drive a whole session from an async stream of events.

        A stream that ends without a FINAL event is finalized when it is
        exhausted. Any error aborts the session and propagates.
        """
        self.start(buffer, start_line)
        try:
            async for event in events:
                if event.kind == StreamKind.TOKEN:
                    self.write(event.text)
                elif event.kind == StreamKind.FINAL:
                    return self.finish(transcript)
            return self.finish(transcript)
        except BaseException:
            self.abort()
            raise

    def _active(self) -> tuple[StreamState, DocumentBuffer]:
        if self._state != WriterState.STREAMING or self._stream is None or self._buffer is None:
            raise RuntimeError("No active streaming session")
        return self._stream, self._buffer

    def _reset(self) -> None:
        self._state = WriterState.IDLE
        self._stream = None
        self._buffer = None
