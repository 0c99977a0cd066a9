"""Shared data type definitions (ServerConfig, TransferAsset, TransferOutcome, etc.)."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

from common.constants import MEGABYTE

if TYPE_CHECKING:
    from blossom.schemas import BlobDescriptor


@dataclass(frozen=True)
class ServerConfig:
    """
    A remote blob server and the largest payload it accepts.
    """
    url: str
    max_upload_size: int

    @classmethod
    def from_megabytes(cls, url: str, max_upload_size_mb: float) -> 'ServerConfig':
        return cls(url=url.rstrip('/'), max_upload_size=int(max_upload_size_mb * MEGABYTE))


@dataclass(frozen=True)
class TransferAsset:
    """
    A local file to be placed on remote servers.

    If sha256 is None it is computed from the file bytes before any
    network call and reused for the probe, the token and the upload.
    """
    path: str
    mime_type: str
    name: str
    sha256: Optional[str] = None
    description: str = "Upload blob"

    def with_sha256(self, sha256: str) -> 'TransferAsset':
        return replace(self, sha256=sha256)


class ProbeResult(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


class OutcomeStatus(Enum):
    UPLOADED = "uploaded"
    DEDUPLICATED = "deduplicated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TransferOutcome:
    """
    Result of one (server, asset) upload attempt.
    """
    server: ServerConfig
    asset: TransferAsset
    status: OutcomeStatus
    descriptor: Optional['BlobDescriptor'] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.status in (OutcomeStatus.UPLOADED, OutcomeStatus.DEDUPLICATED)
