"""
whisperjob.jobs.uploads - Store uploaded recordings and enqueue them.

Uploaded files are written to the records directory as
"<epoch-ms>-<original name>". Two uploads with the same name in the same
millisecond would collide; that is accepted rather than guarded.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generic, TypeVar

from whisperjob.io import write_bytes

logger = logging.getLogger(__name__)

T = TypeVar("T")


def record_filename(original_name: str, now_ms: int | None = None) -> str:
    """Build the stored filename for an upload.

    Only the final path component of the original name is kept.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    name = Path(original_name).name or "upload"
    return f"{now_ms}-{name}"


def save_record_file(
    records_dir: Path,
    original_name: str,
    content: bytes,
    now_ms: int | None = None,
) -> Path:
    """Write an uploaded file into the records directory.

    Args:
        records_dir: Directory shared with the queue workers
        original_name: Filename supplied by the uploader
        content: Raw file bytes
        now_ms: Arrival time in epoch milliseconds (defaults to now)

    Returns:
        Path of the stored file
    """
    path = records_dir / record_filename(original_name, now_ms)
    write_bytes(path, content)
    logger.info("Saved upload %s (%d bytes)", path, len(content))
    return path


def build_payload(input_path: Path) -> dict[str, Any]:
    """Queue payload for a stored recording."""
    return {"input_path": str(input_path)}


class UploadService(Generic[T]):
    """Saves uploads and hands them to the job queue.

    ``enqueue`` is the queue collaborator: it receives the payload and
    returns whatever the queue uses to track completion.
    """

    def __init__(self, records_dir: Path, enqueue: Callable[[dict[str, Any]], T]) -> None:
        self.records_dir = records_dir
        self.enqueue = enqueue

    def submit(self, original_name: str, content: bytes) -> T:
        path = save_record_file(self.records_dir, original_name, content)
        return self.enqueue(build_payload(path))
