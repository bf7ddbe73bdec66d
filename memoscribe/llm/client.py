"""
memoscribe.llm.client - Streaming completion client using litellm.

Provides a unified interface for OpenAI, Ollama and LM Studio. The
completion is streamed as a sequence of token events followed by a
single final event carrying the whole response.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from memoscribe.exceptions import GenerationError
from memoscribe.logging import logger


class StreamKind(str, Enum):
    TOKEN = "token"
    FINAL = "final"


@dataclass
class StreamEvent:
    kind: StreamKind
    text: str = ""


class Generator(Protocol):
    def stream(self, prompt: str, model: str | None = None) -> AsyncIterator[StreamEvent]: ...


class LLMClient:
    """Streaming LLM client wrapper."""

    def __init__(
        self,
        backend: str = "openai",
        model: str = "gpt-4-0613",
        api_key: str = "",
        timeout: int = 300,
    ) -> None:
        self.backend = backend
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self._cloud_backends = {"openai"}

    def _get_model_string(self, model: str) -> str:
        """Get the model string for litellm based on backend."""
        if self.backend == "ollama":
            return f"ollama/{model}"
        elif self.backend == "lmstudio":
            return f"openai/{model}"
        return model

    def _get_api_base(self) -> str | None:
        if self.backend == "ollama":
            return "http://localhost:11434"
        elif self.backend == "lmstudio":
            return "http://localhost:1234/v1"
        return None

    def _check_credentials(self) -> None:
        """Cloud backends need an API key."""
        if self.backend in self._cloud_backends and len(self.api_key.strip()) <= 1:
            raise GenerationError("OpenAI API key is not provided.")

    async def stream(self, prompt: str, model: str | None = None) -> AsyncIterator[StreamEvent]:
        """Stream a completion for prompt.

        Args:
            prompt: The prompt string
            model: Model override (defaults to the client's model)

        Yields:
            TOKEN events as text arrives, then one FINAL event

        Raises:
            GenerationError: If the request fails
        """
        self._check_credentials()

        try:
            import litellm
        except ImportError as e:
            raise GenerationError("litellm not installed. Install with: pip install litellm") from e

        litellm.telemetry = False

        kwargs: dict[str, Any] = {
            "model": self._get_model_string(model or self.model),
            "messages": [{"role": "user", "content": prompt}],
            "stream": True,
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        api_base = self._get_api_base()
        if api_base:
            kwargs["api_base"] = api_base

        parts: list[str] = []
        try:
            response = await litellm.acompletion(**kwargs)
            async for chunk in response:
                text = _delta_text(chunk)
                if text:
                    parts.append(text)
                    yield StreamEvent(StreamKind.TOKEN, text)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"LLM request failed: {e}") from e

        logger.debug("Completion finished with %d token chunks", len(parts))
        yield StreamEvent(StreamKind.FINAL, "".join(parts))


def _delta_text(chunk: Any) -> str:
    """Extract the text delta from a streaming chunk."""
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    if delta is None:
        return ""
    return getattr(delta, "content", None) or ""


def create_client_from_config(config: Any) -> LLMClient:
    """Create LLM client from MemoConfig.

    Args:
        config: MemoConfig instance

    Returns:
        Configured LLMClient
    """
    return LLMClient(
        backend=config.llm_backend,
        model=config.model,
        api_key=config.api_key,
    )
