"""
Helper utilities for CSV Courier.

Common functions used across domains.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional


AUDIT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_file_extension(path: Path) -> str:
    """Get file extension without dot."""
    return path.suffix.lstrip('.')


def is_csv(path: Path) -> bool:
    """Check for an exact, case-sensitive ``csv`` extension."""
    return get_file_extension(path) == "csv"


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""
    try:
        return path.expanduser().resolve()
    except (FileNotFoundError, RuntimeError):
        return path.expanduser().absolute()


def parent_dir(path: Path) -> Optional[Path]:
    """
    Directory holding ``path``.

    Returns:
        Parent directory, or None when ``path`` names no file (root or empty)
    """
    if not path.name:
        return None
    return path.parent


def normalise_header(line: str) -> str:
    """
    Normalize a header line for template lookup.

    Strips a trailing line terminator and a single trailing comma.
    """
    line = line.rstrip("\r\n")
    if line.endswith(","):
        line = line[:-1]
    return line


def one_line(text: str) -> str:
    """Collapse multi-line text (e.g. process stderr) into a single line."""
    lines = [line.strip() for line in text.splitlines()]
    return "; ".join(line for line in lines if line)


def local_timestamp(moment: Optional[datetime] = None) -> str:
    """Local time formatted for audit records."""
    return (moment or datetime.now()).strftime(AUDIT_TIME_FORMAT)
