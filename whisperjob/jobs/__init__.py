"""
whisperjob.jobs - Queue-facing job handling.

Saves uploaded recordings where queue workers can find them, and runs each
dequeued job through transcoding and transcription.
"""

from __future__ import annotations
