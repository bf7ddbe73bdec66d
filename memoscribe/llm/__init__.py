"""
memoscribe.llm - Note generation.

Pipeline Stage 3: assemble the prompt from the configured template and
the transcript, then stream the completion token by token.
"""

from __future__ import annotations
