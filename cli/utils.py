"""Utility functions for CLI operations."""

import mimetypes
import sys

from cli.constants import GREEN, RESET


def guess_mime_type(path: str) -> str:
    """
    Resolve a MIME type from the file extension.

    Args:
        path: Local file path

    Returns:
        MIME type, or application/octet-stream if the extension is unknown
    """
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or 'application/octet-stream'


def print_progress(label: str, percent: float, speed_mbs: float) -> None:
    """Rewrite the current terminal line with upload progress."""
    sys.stdout.write(f"\r{label}: {GREEN}{percent:.1f}%{RESET} ({speed_mbs:.2f} MB/s)")
    if percent >= 100.0:
        sys.stdout.write('\n')
    sys.stdout.flush()


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
