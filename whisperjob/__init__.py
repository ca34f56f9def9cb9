"""
whisperjob - Queue-driven whisper.cpp transcription pipeline.

Takes uploaded audio or video files and produces time-aligned transcripts
through a job pipeline: transcoding → engine invocation → streaming
segment parsing → subtitle/lyric export (WebVTT, SRT, LRC, plain text).
"""

__version__ = "0.1.0"
