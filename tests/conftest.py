"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
import yaml

from memoscribe.audio.signal import Signal


@pytest.fixture
def tmp_vault(tmp_path: Path) -> Path:
    """Create a temporary notes directory with a memoscribe.yaml."""
    vault_dir = tmp_path / "vault"
    vault_dir.mkdir()
    (vault_dir / "Recordings").mkdir()

    config = {
        "api_key": "sk-test",
        "model": "gpt-4o-mini",
        "recording_file_path": "Recordings",
    }
    with open(vault_dir / "memoscribe.yaml", "w") as f:
        yaml.dump(config, f)

    return vault_dir


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a sample configuration dictionary."""
    return {
        "api_key": "sk-test",
        "model": "gpt-4o",
        "llm_backend": "openai",
        "transcription_model": "whisper-1",
        "prompt": "Summarize this:\n\n",
        "include_transcript": True,
        "keep_audio": True,
        "recording_file_path": "Recordings",
        "target_sample_rate": 16000,
        "chunk_duration_seconds": 600,
        "max_chunk_mb": 24,
        "request_delay_seconds": 1.0,
    }


@pytest.fixture
def make_signal() -> Callable[..., Signal]:
    """Factory for sine-wave signals."""

    def _make(
        frequency: float = 440.0,
        duration: float = 1.0,
        sample_rate: int = 16000,
        channels: int = 1,
        amplitude: float = 0.5,
    ) -> Signal:
        t = np.arange(int(round(duration * sample_rate))) / sample_rate
        tone = amplitude * np.sin(2 * np.pi * frequency * t)
        # offset each channel's phase so channel order is observable
        samples = np.stack([np.roll(tone, ch) for ch in range(channels)])
        return Signal(samples=samples.astype(np.float32), sample_rate=sample_rate)

    return _make
