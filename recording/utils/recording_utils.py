"""
Recording Utilities

Shared helpers for segment file naming and the records directory.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from config.settings import (
    FILENAME_FORMAT,
    RECORDS_DIR_NAME,
    VIDEO_FILENAME_EXTENSION,
)


def get_records_dir(base_path: Path, dir_name: str = RECORDS_DIR_NAME) -> Path:
    """
    Return the records directory under base_path, creating it if needed.

    Raises:
        OSError: If the directory cannot be created
    """
    records_dir = base_path / dir_name
    if not records_dir.exists():
        logging.info(f"Creating records directory: {records_dir}")
    records_dir.mkdir(parents=True, exist_ok=True)
    return records_dir


def generate_filename(
    base_path: Path,
    format_string: str = FILENAME_FORMAT,
    extension: str = VIDEO_FILENAME_EXTENSION,
    now: Optional[datetime] = None,
) -> Path:
    """
    Generate timestamped filename for a segment.

    The name has second resolution. When a file with that name already
    exists (two segments started within the same second) a numeric suffix
    is appended so an earlier segment is never overwritten.

    Args:
        base_path: Directory where file will be saved
        format_string: strftime format for filename
        extension: File extension without the dot
        now: Timestamp to use (default: current local time)

    Returns:
        Complete file path that does not exist yet

    Example:
        path = generate_filename(Path("records"))
        # Returns: records/2025-01-15_14-30-22.avi
        # Or:      records/2025-01-15_14-30-22_1.avi if that one exists
    """
    timestamp = (now or datetime.now()).strftime(format_string)
    candidate = base_path / f"{timestamp}.{extension}"

    counter = 1
    while candidate.exists():
        candidate = base_path / f"{timestamp}_{counter}.{extension}"
        counter += 1

    return candidate


def get_recording_files(
    directory: Path,
    pattern: str = f"*.{VIDEO_FILENAME_EXTENSION}",
) -> list[Path]:
    """
    Get list of segment files in directory.

    Returns:
        List of file paths, sorted by name (oldest first, since names
        start with the timestamp)
    """
    if not directory.exists():
        return []
    return sorted(directory.glob(pattern))


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Example:
        format_file_size(45000000) -> "42.9 MB"
    """
    if size_bytes <= 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
