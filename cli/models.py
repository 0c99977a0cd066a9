"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class UploadCommand:
    """Upload files to every configured server."""

    file_list: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a blob by hash or URL."""

    sha256: str
    filename: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class ListCommand:
    """List blobs owned by a public key on every server."""

    pubkey: str | None = None
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a blob from every server."""

    sha256: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class ServersCommand:
    """Show configured servers, or add one when add_url is set."""

    add_url: str | None = None
    max_upload_size_mb: float = 100
    command: Literal["servers"] = "servers"


CommandRequest = (
    UploadCommand
    | DownloadCommand
    | ListCommand
    | DeleteCommand
    | ServersCommand
)
