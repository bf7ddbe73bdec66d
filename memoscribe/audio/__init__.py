"""
memoscribe.audio - Audio decoding and transcoding.

Pipeline Stage 1: decode recorded audio, resample it to the rate the
transcription service expects, split it into bounded chunks and encode
each chunk as 16-bit PCM WAV.
"""

from __future__ import annotations
