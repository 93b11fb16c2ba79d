"""Per-directory ``upload.log`` audit trail."""

import threading
from pathlib import Path

from loguru import logger

from courier.utils.helpers import local_timestamp, one_line

AUDIT_LOG_NAME = "upload.log"

LOCK_STRIPES = 32

# Fixed pool; every path hashes to one lock, so appends to one log never overlap
_locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _lock_for(log_path: Path) -> threading.Lock:
    return _locks[hash(log_path) % LOCK_STRIPES]


def success_message(file_name: str) -> str:
    return f"Upload succeeded! File: {file_name}"


def failure_message(file_name: str, reason: str) -> str:
    return f"Upload failed! File: {file_name} Reason: {reason}"


def record(directory: Path, message: str) -> bool:
    """
    Append a timestamped record to ``<directory>/upload.log``.

    Best-effort: failures are logged and reported through the return value,
    never raised.

    Args:
        directory: Directory holding the file the record is about
        message: Record text, collapsed to one line

    Returns:
        True if the record was written, False otherwise
    """
    log_path = Path(directory) / AUDIT_LOG_NAME
    line = f"{local_timestamp()} - {one_line(message)}\n"

    with _lock_for(log_path):
        try:
            with open(log_path, "a", encoding="utf-8") as log_file:
                log_file.write(line)
        except OSError as e:
            logger.error(f"Failed to write upload log {log_path}: {e}")
            return False

    logger.debug(f"Upload log updated: {log_path}")
    return True
