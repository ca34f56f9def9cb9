"""
whisperjob.extract - Audio transcoding for the engine.

Converts uploaded audio or video into the 16kHz mono 16-bit PCM WAV that
whisper.cpp expects.
"""

from __future__ import annotations
