"""
memoscribe.notes.links - Audio links inside notes.

Finds the audio file a note refers to, either as a wiki link
([[memo.m4a]], ![[memo.wav]]) or a Markdown link ([memo](memo.mp3)),
and resolves it against the vault.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from memoscribe.audio.decode import AUDIO_EXTENSIONS
from memoscribe.exceptions import NoteError
from memoscribe.notes.buffer import DocumentBuffer

_EXT = "|".join(AUDIO_EXTENSIONS)

AUDIO_LINK_PATTERNS = [
    re.compile(rf"(?<=\[\[)([^\[\]|]+\.(?:{_EXT}))(?:\|[^\[\]]*)?(?=\]\])", re.IGNORECASE),
    re.compile(rf"(?<=\]\()([^()\[\]]+\.(?:{_EXT}))(?=\))", re.IGNORECASE),
]


def find_audio_link(text: str) -> str:
    """Return the last audio link in text.

    Patterns are tried in order, so when a note holds both kinds the
    last Markdown link wins over any wiki link.

    Raises:
        NoteError: If the text holds no audio link
    """
    filename = ""
    for pattern in AUDIO_LINK_PATTERNS:
        for match in pattern.finditer(text):
            filename = _normalize(unquote(match.group(1)))

    if not filename:
        raise NoteError("No audio file found in the note.")
    return filename


def resolve_audio_path(link: str, vault_dir: Path) -> Path:
    """Resolve a link to a file in the vault.

    The link is tried as a vault-relative path first, then matched by
    file name anywhere in the vault.

    Raises:
        NoteError: If no matching file exists
    """
    direct = vault_dir / link
    if direct.is_file():
        return direct

    name = PurePosixPath(link).name
    for candidate in sorted(vault_dir.rglob(name)):
        if candidate.is_file():
            return candidate

    raise NoteError(f"File not found: {link}")


def audio_embed(path: str) -> str:
    """Wiki embed for an audio file, as rendered with a player."""
    return f"![[{path}]]"


def insert_link(buffer: DocumentBuffer, line: int, path: str) -> int:
    """Append an audio embed to a line and return that line."""
    existing = buffer.get_line(line)
    separator = " " if existing.strip() else ""
    buffer.set_line(line, existing + separator + audio_embed(path))
    return line


def _normalize(path: str) -> str:
    parts = [p for p in path.strip().replace("\\", "/").split("/") if p not in ("", ".")]
    return "/".join(parts)
