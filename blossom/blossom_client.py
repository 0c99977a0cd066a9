"""HTTP client for a single Blossom blob server."""

import os
import tempfile
import threading
from pathlib import Path
from typing import Iterator, List, Optional, Union

import httpx
from pydantic import ValidationError

from blossom.auth import CapabilityToken, create_delete_token, create_list_token
from blossom.exceptions import DownloadError, RemoteError, TransferCancelledError, UploadError
from blossom.hashing import IncrementalChecksumCalculator
from blossom.progress import ProgressCallback, ProgressReporter
from blossom.schemas import BlobDescriptor
from common.constants import (
    DEFAULT_PROGRESS_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    STREAM_CHUNK_SIZE_BYTES,
)
from common.logging_config import get_logger
from common.types import ProbeResult, TransferAsset

logger = get_logger(__name__)


def _file_mode() -> int:
    """Permission bits a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class BlossomClient:
    """
    Streaming transfer client for Blossom servers.

    The instance only holds options. Every call opens its own HTTP
    connection pool and closes it before returning, so one client can
    be shared between threads and calls never see each other's state.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        chunk_size: int = STREAM_CHUNK_SIZE_BYTES,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL_SECONDS,
        unique_tokens: bool = False,
        verify_downloads: bool = True,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize Blossom client.

        Args:
            timeout: Connect/read/write timeout in seconds for every request
            chunk_size: Bytes read from disk or network per iteration
            progress_interval: Minimum seconds between upload progress callbacks
            unique_tokens: Add a random nonce to upload tokens
            verify_downloads: Reject downloads whose SHA-256 differs from the requested hash
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.progress_interval = progress_interval
        self.unique_tokens = unique_tokens
        self.verify_downloads = verify_downloads
        self.transport = transport

    def _session(self) -> httpx.Client:
        # Redirects are off by default: a redirected upload would have to
        # replay the body, which is a one-shot stream. get() opts in per request.
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=False,
            transport=self.transport
        )

    def probe(self, server: str, sha256: str) -> ProbeResult:
        """
        Check whether a server already holds a blob.

        Args:
            server: Server base URL
            sha256: Content hash

        Returns:
            PRESENT on 200, ABSENT on 404, UNKNOWN for any other status or error
        """
        url = f"{server.rstrip('/')}/{sha256}"
        try:
            with self._session() as session:
                response = session.head(url)
        except httpx.HTTPError as e:
            logger.debug(f"Existence probe failed: HEAD {url} error={type(e).__name__}: {e}")
            return ProbeResult.UNKNOWN

        logger.debug(f"Existence probe: HEAD {url} status={response.status_code}")
        if response.status_code == 200:
            return ProbeResult.PRESENT
        if response.status_code == 404:
            return ProbeResult.ABSENT
        return ProbeResult.UNKNOWN

    def exists(self, server: str, sha256: str) -> bool:
        return self.probe(server, sha256) is ProbeResult.PRESENT

    def _iter_file(
        self,
        path: str,
        reporter: ProgressReporter,
        cancel_event: Optional[threading.Event]
    ) -> Iterator[bytes]:
        with open(path, 'rb') as f:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise TransferCancelledError(f"Upload of {path} cancelled")
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                reporter.update(len(chunk))
                yield chunk
        reporter.finish()

    def put(
        self,
        server: str,
        asset: TransferAsset,
        token: CapabilityToken,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> BlobDescriptor:
        """
        Stream a local file to a server's upload endpoint.

        Always uploads. Skipping blobs the server already holds is done by
        upload_to_servers, which checks existence before issuing a token.

        Args:
            server: Server base URL
            asset: File to upload
            token: Upload token for this asset's hash and size
            on_progress: Called with (percent_complete, speed_mbs) at a bounded rate
            cancel_event: Set to abort the upload at the next chunk

        Returns:
            BlobDescriptor returned by the server

        Raises:
            UploadError: Non-2xx status, network failure, bad response body or unreadable file
            TransferCancelledError: If cancel_event was set
        """
        url = f"{server.rstrip('/')}/upload"
        try:
            file_size = os.path.getsize(asset.path)
        except OSError as e:
            raise UploadError(f"Failed to upload file {asset.path} to {server}: {e}") from e

        reporter = ProgressReporter(file_size, on_progress, self.progress_interval)
        headers = {
            'Content-Type': asset.mime_type,
            'Content-Length': str(file_size),
        }
        headers.update(token.authorization_header())

        logger.info(f"Uploading {asset.name} ({file_size} bytes) to {url}")
        try:
            with self._session() as session:
                response = session.put(
                    url,
                    content=self._iter_file(asset.path, reporter, cancel_event),
                    headers=headers
                )
        except httpx.HTTPError as e:
            raise UploadError(f"Failed to upload file {asset.path} to {server}: {e}") from e
        except OSError as e:
            raise UploadError(f"Failed to read file {asset.path} for upload to {server}: {e}") from e

        if not response.is_success:
            raise UploadError(
                f"Failed to upload file {asset.path} to {server}: "
                f"status={response.status_code} ({response.text})",
                status_code=response.status_code,
                body=response.text
            )

        try:
            blob = BlobDescriptor.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UploadError(
                f"Invalid upload response from {server}: {e}",
                status_code=response.status_code,
                body=response.text
            ) from e

        logger.info(f"File {asset.path} uploaded successfully to {blob.url}")
        return blob

    def get(
        self,
        server: str,
        sha256: str,
        destination_dir: Union[str, Path],
        filename: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Path:
        """
        Stream a blob from a server into destination_dir.

        Redirects are followed, so servers that hand blobs off to a CDN work.

        Bytes are written to a hidden temporary file next to the target and
        renamed into place only after the body was fully received (and
        verified, if enabled). No file is left under the final name on failure.

        Args:
            server: Server base URL
            sha256: Content hash of the blob
            destination_dir: Directory to write into (created if missing)
            filename: Target file name (defaults to the hash)
            cancel_event: Set to abort the download at the next chunk

        Returns:
            Path of the downloaded file

        Raises:
            DownloadError: Non-2xx status, network failure, hash mismatch or local I/O error
            TransferCancelledError: If cancel_event was set
        """
        url = f"{server.rstrip('/')}/{sha256}"
        destination_dir = Path(destination_dir)
        destination = destination_dir / (filename or sha256)

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            with self._session() as session:
                with session.stream('GET', url, follow_redirects=True) as response:
                    if not response.is_success:
                        response.read()
                        raise DownloadError(
                            f"Failed to download file from {url}: status={response.status_code}",
                            status_code=response.status_code,
                            body=response.text
                        )
                    self._write_stream(response, destination, sha256, cancel_event)
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download file from {url} to {destination}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Failed to write {destination}: {e}") from e

        logger.info(f"File downloaded successfully to {destination}")
        return destination

    def _write_stream(
        self,
        response: httpx.Response,
        destination: Path,
        sha256: str,
        cancel_event: Optional[threading.Event]
    ) -> None:
        fd, temp_path = tempfile.mkstemp(
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix='.part'
        )
        calculator = IncrementalChecksumCalculator()
        try:
            with os.fdopen(fd, 'wb') as f:
                for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                    if cancel_event is not None and cancel_event.is_set():
                        raise TransferCancelledError(f"Download of {sha256} cancelled")
                    calculator.update(chunk)
                    f.write(chunk)

            actual = calculator.finalize()
            if self.verify_downloads and actual != sha256.lower():
                raise DownloadError(f"Hash mismatch for {sha256}: server sent {actual}")

            os.chmod(temp_path, _file_mode())
            os.replace(temp_path, destination)
        except BaseException:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise

    def list_blobs(self, server: str, pubkey: str, signer) -> List[BlobDescriptor]:
        """
        List the blobs a public key has stored on a server.

        Args:
            server: Server base URL
            pubkey: Hex public key whose blobs to list
            signer: Signing identity used for the list token

        Returns:
            List of BlobDescriptor

        Raises:
            RemoteError: Non-2xx status, network failure or malformed body
        """
        url = f"{server.rstrip('/')}/list/{pubkey}"
        token = create_list_token(signer)
        headers = {'Content-Type': 'application/json; charset=utf-8'}
        headers.update(token.authorization_header())

        try:
            with self._session() as session:
                response = session.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise RemoteError(f"Failed to list blobs on {server}: {e}") from e

        if not response.is_success:
            logger.warning(f"Failed to list blobs: GET {url} status={response.status_code}")
            raise RemoteError(
                f"Failed to list blobs on {server}: status={response.status_code}",
                status_code=response.status_code,
                body=response.text
            )

        try:
            return [BlobDescriptor.model_validate(item) for item in response.json()]
        except (ValueError, TypeError, ValidationError) as e:
            raise RemoteError(f"Invalid list response from {server}: {e}", body=response.text) from e

    def delete_blob(self, server: str, sha256: str, signer) -> None:
        """
        Delete a blob from a server.

        Args:
            server: Server base URL
            sha256: Content hash of the blob
            signer: Signing identity used for the delete token

        Raises:
            RemoteError: Non-2xx status or network failure
        """
        url = f"{server.rstrip('/')}/{sha256}"
        token = create_delete_token(signer, sha256)

        try:
            with self._session() as session:
                response = session.delete(url, headers=token.authorization_header())
        except httpx.HTTPError as e:
            raise RemoteError(f"Failed to delete {sha256} on {server}: {e}") from e

        if not response.is_success:
            logger.warning(f"Failed to delete blob: DELETE {url} status={response.status_code}")
            raise RemoteError(
                f"Failed to delete {sha256} on {server}: status={response.status_code}",
                status_code=response.status_code,
                body=response.text
            )
        logger.info(f"Deleted {sha256} on {server}")
