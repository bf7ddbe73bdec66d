"""
memoscribe.notes - Markdown note buffers and incremental writing.

Pipeline Stage 4: write streamed tokens into a note without touching
existing content, then append the transcript block.
"""

from __future__ import annotations
