"""Pydantic schemas for Blossom server responses."""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class BlobDescriptor(BaseModel):
    """Descriptor of a stored blob, as returned by PUT /upload and GET /list."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    sha256: str
    size: int
    url: str
    created: int
    type: Optional[str] = None
