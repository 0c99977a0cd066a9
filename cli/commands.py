"""Command handler functions for CLI operations."""

import os
from pathlib import Path
from typing import Optional

from blossom.blossom_client import BlossomClient
from blossom.download import download_from_servers
from blossom.exceptions import (
    AllServersFailedError,
    NoServersConfiguredError,
    RemoteError,
    SigningError,
)
from blossom.signer import NostrSigner
from blossom.upload import upload_to_servers
from cli.config import Config
from cli.models import (
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    ServersCommand,
    UploadCommand,
)
from cli.utils import format_file_size, guess_mime_type, print_progress
from common.logging_config import get_logger
from common.types import OutcomeStatus, ServerConfig, TransferAsset

logger = get_logger(__name__)


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config loaded from ~/.blossom/config.json
    """
    global _config
    if _config is None:
        logger.debug("Loading CLI config")
        _config = Config(Path.home() / '.blossom' / 'config.json')
    return _config


def build_client(config: Config) -> BlossomClient:
    return BlossomClient(
        timeout=config.get_timeout(),
        progress_interval=config.get_progress_interval(),
        unique_tokens=config.get_unique_tokens()
    )


def get_signer(config: Config) -> NostrSigner:
    """
    Build the signing identity from the configured secret key.

    Raises:
        SigningError: If no key is configured or the key is invalid
    """
    secret_key = config.get_secret_key()
    if not secret_key:
        raise SigningError("No secret key configured. Set BLOSSOM_SECRET_KEY or 'secret_key' in the config file.")
    return NostrSigner(secret_key)


def handle_upload(cmd: UploadCommand, config: Optional[Config] = None,
                  client: Optional[BlossomClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_list
        config: Optional Config for dependency injection (testing)
        client: Optional BlossomClient for dependency injection (testing)

    Returns:
        One result line per (server, file) pair
    """
    config = config or get_config()
    client = client or build_client(config)
    logger.info(f"Executing upload command: {len(cmd.file_list)} file(s)")

    results = []
    assets = []
    for file_path in cmd.file_list:
        if not os.path.isfile(file_path):
            results.append(f"Error: File not found: {file_path}")
            continue
        name = os.path.basename(file_path)
        assets.append(TransferAsset(
            path=file_path,
            mime_type=guess_mime_type(file_path),
            name=name,
            description=f"Upload {name}"
        ))

    if not assets:
        return '\n'.join(results) if results else "No files uploaded."

    def on_progress(server, asset, percent, speed):
        print_progress(f"Uploading {asset.name} to {server.url}", percent, speed)

    try:
        outcomes = upload_to_servers(
            config.get_servers(),
            assets,
            get_signer(config),
            on_progress=on_progress,
            client=client
        )
    except (NoServersConfiguredError, SigningError) as e:
        return f"Error: {e}"

    for outcome in outcomes:
        name, url = outcome.asset.name, outcome.server.url
        if outcome.status is OutcomeStatus.UPLOADED:
            results.append(
                f"Uploaded: {name} -> {outcome.descriptor.url} "
                f"(Size: {format_file_size(outcome.descriptor.size)})"
            )
        elif outcome.status is OutcomeStatus.DEDUPLICATED:
            results.append(f"Already stored: {name} -> {outcome.descriptor.url}")
        elif outcome.status is OutcomeStatus.SKIPPED:
            results.append(
                f"Skipped: {name} on {url} (exceeds limit of "
                f"{format_file_size(outcome.server.max_upload_size)})"
            )
        else:
            results.append(f"Error uploading {name} to {url}: {outcome.error}")

    return '\n'.join(results)


def handle_download(cmd: DownloadCommand, config: Optional[Config] = None,
                    client: Optional[BlossomClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with sha256 and optional filename
        config: Optional Config for dependency injection (testing)
        client: Optional BlossomClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    config = config or get_config()
    client = client or build_client(config)
    logger.info(f"Executing download command: sha256={cmd.sha256} filename={cmd.filename}")

    servers = [server.url for server in config.get_servers()]
    try:
        path = download_from_servers(
            servers, cmd.sha256, config.get_download_dir(), cmd.filename, client=client
        )
    except (NoServersConfiguredError, AllServersFailedError) as e:
        return f"Error: {e}"

    return f"Downloaded: {cmd.sha256} ({format_file_size(path.stat().st_size)})\nSaved to: {path.absolute()}"


def handle_list(cmd: ListCommand, config: Optional[Config] = None,
                client: Optional[BlossomClient] = None) -> str:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand with optional pubkey
        config: Optional Config for dependency injection (testing)
        client: Optional BlossomClient for dependency injection (testing)

    Returns:
        Formatted list of blobs per server
    """
    config = config or get_config()
    client = client or build_client(config)

    try:
        signer = get_signer(config)
    except SigningError as e:
        return f"Error: {e}"

    pubkey = cmd.pubkey or signer.public_key
    servers = config.get_servers()
    if not servers:
        return "Error: No servers configured."

    output = []
    for server in servers:
        try:
            blobs = client.list_blobs(server.url, pubkey, signer)
        except RemoteError as e:
            output.append(f"{server.url}: Error: {e}")
            continue

        output.append(f"{server.url}: {len(blobs)} blob(s)")
        for blob in blobs:
            output.append(
                f"  - {blob.sha256[:16]}... {format_file_size(blob.size)} "
                f"{blob.type or 'unknown type'}\n    {blob.url}"
            )

    return '\n'.join(output)


def handle_delete(cmd: DeleteCommand, config: Optional[Config] = None,
                  client: Optional[BlossomClient] = None) -> str:
    """
    Handle 'delete' command.

    Args:
        cmd: DeleteCommand with sha256
        config: Optional Config for dependency injection (testing)
        client: Optional BlossomClient for dependency injection (testing)

    Returns:
        One result line per server
    """
    config = config or get_config()
    client = client or build_client(config)

    try:
        signer = get_signer(config)
    except SigningError as e:
        return f"Error: {e}"

    servers = config.get_servers()
    if not servers:
        return "Error: No servers configured."

    results = []
    for server in servers:
        try:
            client.delete_blob(server.url, cmd.sha256, signer)
            results.append(f"Deleted {cmd.sha256[:16]}... on {server.url}")
        except RemoteError as e:
            results.append(f"Error deleting on {server.url}: {e}")

    return '\n'.join(results)


def handle_servers(cmd: ServersCommand, config: Optional[Config] = None) -> str:
    """Handle 'servers' command: list servers, or append one to the config."""
    config = config or get_config()
    if cmd.add_url:
        config.add_server(cmd.add_url, cmd.max_upload_size_mb)
        added = ServerConfig.from_megabytes(cmd.add_url, cmd.max_upload_size_mb)
        return f"Added server: {added.url} (max upload {format_file_size(added.max_upload_size)})"

    servers = config.get_servers()
    if not servers:
        return "No servers configured."

    lines = [f"{len(servers)} server(s), in priority order:"]
    for index, server in enumerate(servers, start=1):
        lines.append(f"  {index}. {server.url} (max upload {format_file_size(server.max_upload_size)})")
    return '\n'.join(lines)
