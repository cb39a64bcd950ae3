"""Helpers shared by the server and the client."""

from pathlib import PurePosixPath

from common.exceptions import InvalidFileNameError


def sanitize_file_name(file_name: str) -> str:
    """
    Strip every directory component from a file name.

    Both '/' and '\\' count as separators so Windows paths are reduced too.

    Args:
        file_name: Name or path, e.g. as sent by a client

    Returns:
        Bare file name

    Raises:
        InvalidFileNameError: If nothing usable remains
    """
    base_name = PurePosixPath(file_name.replace('\\', '/')).name
    if base_name in ('', '.', '..'):
        raise InvalidFileNameError(f"No file name in {file_name!r}")
    return base_name


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
