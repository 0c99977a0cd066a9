"""Provides SHA-256 content addressing for local files and streamed data."""

import hashlib
from pathlib import Path
from typing import Union

from common.constants import STREAM_CHUNK_SIZE_BYTES


def compute_file_sha256(path: Union[str, Path], chunk_size: int = STREAM_CHUNK_SIZE_BYTES) -> str:
    """
    Compute the SHA-256 content address of a file without loading it whole.

    Args:
        path: Local file path
        chunk_size: Read size in bytes

    Returns:
        64 character lowercase hex digest

    Raises:
        OSError: If the file cannot be read
    """
    calculator = IncrementalChecksumCalculator()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            calculator.update(chunk)
    return calculator.finalize()


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streaming data.
    
    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(chunk1)
        calculator.update(chunk2)
        final_checksum = calculator.finalize()
    """
    
    def __init__(self):
        self._hasher = hashlib.sha256()
        self._finalized = False
    
    def update(self, data: bytes) -> None:
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
    
    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.
        
        Returns:
            Hexadecimal string representation of SHA-256 hash
        """
        self._finalized = True
        return self._hasher.hexdigest()
