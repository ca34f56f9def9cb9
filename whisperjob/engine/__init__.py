"""
whisperjob.engine - whisper.cpp engine integration.

Builds platform-specific engine commands, runs the engine as a subprocess
and parses its streamed output into transcript events.
"""

from __future__ import annotations
