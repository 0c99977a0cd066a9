"""Download a blob from the first Blossom server that can serve it."""

import threading
from pathlib import Path
from typing import List, Optional, Union

from blossom.blossom_client import BlossomClient
from blossom.exceptions import AllServersFailedError, NoServersConfiguredError, RemoteError
from common.logging_config import get_logger

logger = get_logger(__name__)


def download_from_servers(
    servers: List[str],
    sha256: str,
    destination_dir: Union[str, Path],
    filename: Optional[str] = None,
    client: Optional[BlossomClient] = None,
    cancel_event: Optional[threading.Event] = None
) -> Path:
    """
    Try servers in order until one delivers the blob.

    Args:
        servers: Ordered server base URLs
        sha256: Content hash of the blob
        destination_dir: Directory to write into
        filename: Target file name (defaults to the hash)
        client: Transfer client (a default BlossomClient if None)
        cancel_event: Set to abort the download

    Returns:
        Path of the downloaded file

    Raises:
        NoServersConfiguredError: If servers is empty
        AllServersFailedError: If every server failed; chained from the last failure
        TransferCancelledError: If cancel_event was set
    """
    if not servers:
        raise NoServersConfiguredError("No servers were provided for the download.")

    client = client or BlossomClient()
    errors = []

    for server in servers:
        logger.info(f"Attempting to download {sha256} from server: {server}")
        try:
            path = client.get(server, sha256, destination_dir, filename, cancel_event=cancel_event)
        except RemoteError as e:
            errors.append((server, e))
            logger.warning(f"Failed to download from server: {server} - {e}")
            continue
        logger.info(f"Successfully downloaded from server: {server}")
        return path

    last_server, last_error = errors[-1]
    raise AllServersFailedError(
        f"Failed to download {sha256} from all {len(servers)} server(s); "
        f"last error from {last_server}: {last_error}",
        last_error=last_error,
        errors=errors
    ) from last_error
