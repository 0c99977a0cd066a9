"""Upload a set of assets to every configured Blossom server."""

import os
import threading
from typing import Callable, Dict, List, Optional

from blossom.auth import create_upload_token
from blossom.blossom_client import BlossomClient
from blossom.exceptions import NoServersConfiguredError, RemoteError
from blossom.hashing import compute_file_sha256
from blossom.schemas import BlobDescriptor
from blossom.utils import now
from common.logging_config import get_logger
from common.types import OutcomeStatus, ProbeResult, ServerConfig, TransferAsset, TransferOutcome

logger = get_logger(__name__)

ServerProgressCallback = Callable[[ServerConfig, TransferAsset, float, float], None]
ErrorCallback = Callable[[TransferOutcome], None]


def upload_to_servers(
    servers: List[ServerConfig],
    assets: List[TransferAsset],
    signer,
    on_progress: Optional[ServerProgressCallback] = None,
    on_error: Optional[ErrorCallback] = None,
    client: Optional[BlossomClient] = None,
    cancel_event: Optional[threading.Event] = None
) -> List[TransferOutcome]:
    """
    Upload every asset to every server, one (server, asset) pair at a time.

    Servers are processed in list order and assets in the order given.
    A failure on one pair is recorded and passed to on_error; processing
    continues with the next pair. Assets larger than a server's limit are
    skipped for that server.

    Args:
        servers: Ordered server list
        assets: Files to upload
        signer: Signing identity for upload tokens
        on_progress: Called with (server, asset, percent_complete, speed_mbs)
        on_error: Called with the outcome of every failed pair
        client: Transfer client (a default BlossomClient if None)
        cancel_event: Set to abort the batch

    Returns:
        One TransferOutcome per (server, asset) pair

    Raises:
        NoServersConfiguredError: If servers is empty
        SigningError: If an upload token cannot be signed
        TransferCancelledError: If cancel_event was set
    """
    if not servers:
        raise NoServersConfiguredError("No servers were provided for the upload.")

    client = client or BlossomClient()
    hashes: Dict[int, str] = {}
    outcomes = []

    for server in servers:
        for index, asset in enumerate(assets):
            outcome = _upload_one(client, server, asset, index, hashes, signer, on_progress, cancel_event)
            outcomes.append(outcome)
            if outcome.status is OutcomeStatus.FAILED:
                logger.error(f"Upload of {asset.name} to {server.url} failed: {outcome.error}")
                if on_error:
                    on_error(outcome)

    failed = sum(1 for o in outcomes if o.status is OutcomeStatus.FAILED)
    logger.info(
        f"Upload batch finished: {len(assets)} asset(s), {len(servers)} server(s), "
        f"{len(outcomes) - failed} ok/skipped, {failed} failed"
    )
    return outcomes


def _upload_one(
    client: BlossomClient,
    server: ServerConfig,
    asset: TransferAsset,
    index: int,
    hashes: Dict[int, str],
    signer,
    on_progress: Optional[ServerProgressCallback],
    cancel_event: Optional[threading.Event]
) -> TransferOutcome:
    try:
        size = os.path.getsize(asset.path)
        if size > server.max_upload_size:
            logger.info(
                f"Can not upload {asset.name} to {server.url} because it exceeds the size limit: "
                f"{size} > {server.max_upload_size} bytes"
            )
            return TransferOutcome(server, asset, OutcomeStatus.SKIPPED)

        # Hash once per asset; every server sees the same digest.
        if index not in hashes:
            hashes[index] = asset.sha256 or compute_file_sha256(asset.path)
        asset = asset.with_sha256(hashes[index])

        probe = client.probe(server.url, asset.sha256)
        if probe is ProbeResult.PRESENT:
            logger.info(f"{asset.name} already exists on {server.url}. No upload needed.")
            blob = BlobDescriptor(
                sha256=asset.sha256,
                size=size,
                url=f"{server.url.rstrip('/')}/{asset.sha256}",
                created=now(),
                type=asset.mime_type
            )
            return TransferOutcome(server, asset, OutcomeStatus.DEDUPLICATED, descriptor=blob)
        if probe is ProbeResult.UNKNOWN:
            logger.warning(f"Could not determine whether {server.url} holds {asset.sha256}; uploading")

        token = create_upload_token(
            signer, size, asset.sha256, asset.name,
            description=asset.description,
            unique=client.unique_tokens
        )

        progress = None
        if on_progress:
            def progress(percent: float, speed: float) -> None:
                on_progress(server, asset, percent, speed)

        blob = client.put(server.url, asset, token, on_progress=progress, cancel_event=cancel_event)
        return TransferOutcome(server, asset, OutcomeStatus.UPLOADED, descriptor=blob)

    except (RemoteError, OSError) as e:
        return TransferOutcome(server, asset, OutcomeStatus.FAILED, error=e)
