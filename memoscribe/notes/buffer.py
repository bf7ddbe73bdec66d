"""
memoscribe.notes.buffer - Line-addressed text buffers.

DocumentBuffer is the narrow interface the note writer mutates. Line
indices are zero-based and contiguous. Setting a line to text that
contains newlines replaces it with several lines, so the buffer grows
as generated text arrives.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class DocumentBuffer(Protocol):
    def get_line(self, index: int) -> str: ...

    def set_line(self, index: int, text: str) -> None: ...

    def last_line(self) -> int: ...


class LineBuffer:
    """In-memory DocumentBuffer."""

    def __init__(self, text: str = "") -> None:
        self.lines: list[str] = text.split("\n")

    def get_line(self, index: int) -> str:
        if not 0 <= index < len(self.lines):
            raise IndexError(f"Line {index} out of range (last line is {self.last_line()})")
        return self.lines[index]

    def set_line(self, index: int, text: str) -> None:
        if not 0 <= index <= len(self.lines):
            raise IndexError(f"Line {index} out of range (last line is {self.last_line()})")
        self.lines[index : index + 1] = text.split("\n")

    def last_line(self) -> int:
        return len(self.lines) - 1

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class NoteFile(LineBuffer):
    """A Markdown note on disk, edited line by line.

    With write_through enabled every set_line is flushed to disk so an
    open editor sees the note grow while tokens stream in.
    """

    def __init__(self, path: Path, write_through: bool = False) -> None:
        self.path = path
        self.write_through = write_through
        text = path.read_text(encoding="utf-8") if path.exists() else ""
        super().__init__(text)

    def set_line(self, index: int, text: str) -> None:
        super().set_line(index, text)
        if self.write_through:
            self.save()

    def save(self) -> None:
        """Write the buffer back to the note file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.text, encoding="utf-8")
