"""Helpers for working with content addressed blob URLs."""

import re
import time
from typing import Optional
from urllib.parse import urlparse

SHA256_PATTERN = re.compile(r'[0-9a-f]{64}', re.IGNORECASE)


def get_hash_from_url(url: str) -> Optional[str]:
    """
    Extract the last SHA-256 hex digest embedded in a URL path.

    Args:
        url: Absolute blob URL, e.g. https://cdn.example/<sha256>.mp4

    Returns:
        The last 64 character hex run in the path, or None if there is none
    """
    matches = SHA256_PATTERN.findall(urlparse(url).path)
    return matches[-1] if matches else None


def is_sha256(value: str) -> bool:
    return len(value) == 64 and SHA256_PATTERN.fullmatch(value) is not None


def now() -> int:
    return int(time.time())
