"""
memoscribe.transcribe.backend - Speech-to-text backend using litellm.

Submits one WAV chunk per request to a Whisper-compatible endpoint and
maps provider failures onto the memoscribe exception hierarchy.
"""

from __future__ import annotations

from typing import Protocol

from memoscribe.exceptions import (
    AuthError,
    PayloadTooLargeError,
    RequestError,
    TranscriptionBackendError,
    TranscriptionError,
)


class Transcriber(Protocol):
    def check_credentials(self) -> None: ...

    async def submit(self, audio: bytes, model: str) -> str: ...


class LiteLLMTranscriber:
    """Transcription client for OpenAI-compatible /audio/transcriptions endpoints."""

    def __init__(
        self,
        api_key: str,
        timeout: int = 300,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout

    def check_credentials(self) -> None:
        """Fail fast on a missing key, before any audio is processed."""
        if len(self.api_key.strip()) <= 1:
            raise AuthError("OpenAI API key is not provided.")

    async def submit(self, audio: bytes, model: str = "whisper-1") -> str:
        """Transcribe a single WAV buffer.

        Args:
            audio: WAV file contents
            model: Transcription model identifier

        Returns:
            Transcribed text

        Raises:
            AuthError: Missing or invalid API key
            RequestError: Request rejected as malformed
            PayloadTooLargeError: Upload rejected as too large
            TranscriptionBackendError: Any other backend failure
        """
        self.check_credentials()

        try:
            import litellm
        except ImportError as e:
            raise TranscriptionBackendError(
                "litellm not installed. Install with: pip install litellm"
            ) from e

        litellm.telemetry = False

        kwargs = {
            "model": model,
            "file": ("audio.wav", audio, "audio/wav"),
            "api_key": self.api_key,
            "timeout": self.timeout,
        }

        try:
            response = await litellm.atranscription(**kwargs)
        except Exception as e:
            raise classify_backend_error(e) from e

        text = getattr(response, "text", None)
        if text is None and isinstance(response, dict):
            text = response.get("text")
        if text is None:
            raise TranscriptionBackendError("Transcription response contained no text")
        return text


def classify_backend_error(error: Exception) -> TranscriptionError:
    """Map a provider exception onto the transcription error taxonomy."""
    if isinstance(error, TranscriptionError):
        return error

    status = getattr(error, "status_code", None)
    message = str(error)

    if status == 401 or _is_litellm_error(error, "AuthenticationError"):
        return AuthError("OpenAI API key is not valid.")
    if status == 413 or "maximum content size" in message.lower():
        return PayloadTooLargeError(f"Audio chunk rejected as too large: {message}")
    if status == 400 or _is_litellm_error(error, "BadRequestError"):
        return RequestError("Bad request. Please check the format of the request.")
    return TranscriptionBackendError(f"Error: {message}")


def _is_litellm_error(error: Exception, name: str) -> bool:
    try:
        import litellm
    except ImportError:
        return False
    cls = getattr(litellm, name, None)
    return isinstance(cls, type) and isinstance(error, cls)
