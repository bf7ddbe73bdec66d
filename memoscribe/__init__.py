"""
memoscribe - Voice memo to Markdown notes.

Turns a recorded audio file into notes through a short pipeline:
decode → resample → chunk → WAV encode → transcription → prompt →
streamed note generation written line by line into a Markdown note.
"""

__version__ = "0.1.0"
