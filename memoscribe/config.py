"""
memoscribe.config - YAML config loading and validation.

Handles loading memoscribe.yaml from the vault directory, applying
defaults, and validating all parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from memoscribe.exceptions import ConfigError

CONFIG_FILENAME = "memoscribe.yaml"

MODELS: list[str] = [
    "gpt-3.5-turbo-16k",
    "gpt-3.5-turbo-0613",
    "text-davinci-003",
    "text-davinci-002",
    "code-davinci-002",
    "code-davinci-001",
    "gpt-4-0613",
    "gpt-4-32k-0613",
    "gpt-4o",
    "gpt-4o-mini",
]

LLM_BACKENDS = {"openai", "ollama", "lmstudio"}

DEFAULT_PROMPT = (
    "You are an expert note-making AI who specializes in the Linking Your Thinking "
    "(LYT) strategy. The following is a transcription of a recording of someone "
    "talking aloud or people in a conversation. There may be a lot of random things "
    "said given the fluidity of conversation or thought process and the microphone's "
    "ability to pick up all audio. Give me detailed notes in markdown language on what "
    "was said in the most easy-to-understand, detailed, and conceptual format. Include "
    "any helpful information that can conceptualize the notes further or enhance the "
    "ideas, and then summarize what was said. Do not mention \"the speaker\" anywhere "
    "in your response. The notes you write should be written as if I were writing "
    "them. Finally, ensure to end with code for a mermaid chart that shows an "
    "enlightening concept map combining both the transcription and the information "
    "you added to it. The following is the transcribed audio:\n\n"
)


class MemoConfig(BaseModel):
    """Resolved configuration for a memoscribe vault."""

    api_key: str = ""
    model: str = "gpt-4-0613"
    llm_backend: str = "openai"
    transcription_model: str = "whisper-1"

    prompt: str = DEFAULT_PROMPT
    include_transcript: bool = True
    keep_audio: bool = True
    recording_file_path: str = ""

    target_sample_rate: int = Field(default=16000, gt=0)
    chunk_duration_seconds: float = Field(default=600.0, gt=0.0)
    max_chunk_mb: float = Field(default=24.0, gt=0.0, le=25.0)
    request_delay_seconds: float = Field(default=1.0, ge=1.0)
    generation_timeout_seconds: float = Field(default=600.0, gt=0.0)

    @field_validator("llm_backend")
    @classmethod
    def validate_llm_backend(cls, v: str) -> str:
        if v not in LLM_BACKENDS:
            raise ValueError(f"llm_backend must be one of: {LLM_BACKENDS}")
        return v

    @model_validator(mode="after")
    def validate_model(self) -> MemoConfig:
        # local backends serve whatever model names they have pulled
        if self.llm_backend == "openai" and self.model not in MODELS:
            raise ValueError(f"model must be one of: {MODELS}")
        return self

    @property
    def max_chunk_bytes(self) -> int:
        return int(self.max_chunk_mb * 1024 * 1024)


def find_vault_dir(start: Path | None = None) -> Path | None:
    """Find the vault directory by looking for memoscribe.yaml."""
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / CONFIG_FILENAME).exists():
            return current
        if current == current.parent:
            return None
        current = current.parent


def load_config(vault_dir: Path) -> MemoConfig:
    """Load and validate configuration from a vault directory."""
    config_file = vault_dir / CONFIG_FILENAME
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found in {vault_dir}")

    with open(config_file, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    try:
        return MemoConfig(**{k: v for k, v in raw_config.items() if v is not None})
    except ValidationError as e:
        raise ConfigError(f"Invalid {CONFIG_FILENAME}: {e}") from e


def create_default_config(**overrides: Any) -> dict[str, Any]:
    """Create a default config dict, applying any overrides."""
    defaults = MemoConfig().model_dump()
    for key, value in overrides.items():
        if value is not None:
            defaults[key] = value
    return defaults


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
