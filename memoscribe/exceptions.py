"""
memoscribe.exceptions - Custom exception classes.

All memoscribe-specific exceptions inherit from MemoscribeError.
"""


class MemoscribeError(Exception):
    """Base exception for all memoscribe errors."""

    pass


class ConfigError(MemoscribeError):
    """Configuration loading or validation error."""

    pass


class DecodeError(MemoscribeError):
    """Audio could not be decoded, or decoded to an unusable signal."""

    pass


class NoAudioError(MemoscribeError):
    """Decoded signal holds no audio frames."""

    pass


class EncodingTooLargeError(MemoscribeError):
    """An encoded chunk exceeds the transcription payload cap."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Chunk size exceeds {limit / (1024 * 1024):.0f} MB limit "
            f"({size / (1024 * 1024):.1f} MB)."
        )


class TranscriptionError(MemoscribeError):
    """Transcription stage error."""

    pass


class AuthError(TranscriptionError):
    """Missing or rejected API credential."""

    pass


class RequestError(TranscriptionError):
    """The transcription service rejected the request as malformed."""

    pass


class PayloadTooLargeError(TranscriptionError):
    """The transcription service rejected the upload size."""

    pass


class TranscriptionBackendError(TranscriptionError):
    """Any other transcription backend failure."""

    pass


class GenerationError(MemoscribeError):
    """Completion backend or prompt error."""

    pass


class NoteError(MemoscribeError):
    """Note or audio link resolution error."""

    pass


class AlreadyInProgressError(MemoscribeError):
    """A transcription or generation is already running."""

    def __init__(self, message: str = "Generator is already in progress."):
        super().__init__(message)
