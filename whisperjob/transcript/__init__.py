"""
whisperjob.transcript - Transcript model and text format converters.

Segments carry engine-style timestamps (HH:MM:SS.mmm) and convert to and
from WebVTT, SubRip, LRC and plain text.
"""

from __future__ import annotations
