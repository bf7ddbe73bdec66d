"""
memoscribe.transcribe - Speech-to-text stage.

Pipeline Stage 2: submit WAV chunks to a Whisper-compatible service one
at a time and stitch the returned fragments back together in order.
"""

from __future__ import annotations
