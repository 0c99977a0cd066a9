"""Shared pytest fixtures for all tests."""

import base64
import hashlib
import json

import httpx
import pytest

from blossom.blossom_client import BlossomClient
from blossom.signer import NostrSigner
from cli.config import Config

TEST_SECRET_KEY = '7f' * 32


class FakeBlossomServer:
    """In-memory Blossom server answering the HTTP routes the client uses."""

    def __init__(self, host: str, upload_status: int = 200, download_status: int = 200,
                 head_status: int | None = None, corrupt_downloads: bool = False,
                 redirect_downloads_to: str | None = None, stalled: bool = False):
        self.host = host
        self.url = f"http://{host}"
        self.blobs: dict[str, bytes] = {}
        self.types: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.upload_status = upload_status
        self.download_status = download_status
        self.head_status = head_status
        self.corrupt_downloads = corrupt_downloads
        self.redirect_downloads_to = redirect_downloads_to
        self.stalled = stalled

    def add_blob(self, data: bytes, mime_type: str = 'application/octet-stream') -> str:
        sha256 = hashlib.sha256(data).hexdigest()
        self.blobs[sha256] = data
        self.types[sha256] = mime_type
        return sha256

    def methods(self) -> list[str]:
        return [request.method for request in self.requests]

    def descriptor(self, sha256: str) -> dict:
        return {
            'sha256': sha256,
            'size': len(self.blobs[sha256]),
            'url': f"{self.url}/{sha256}",
            'created': 1700000000,
            'type': self.types.get(sha256),
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.stalled:
            raise httpx.ReadTimeout(f"{self.host} did not answer in time", request=request)
        path = request.url.path.strip('/')

        if request.method == 'PUT' and path == 'upload':
            if self.upload_status != 200:
                return httpx.Response(self.upload_status, text='upload rejected')
            body = request.read()
            sha256 = self.add_blob(body, request.headers.get('Content-Type'))
            return httpx.Response(200, json=self.descriptor(sha256))

        if request.method == 'GET' and path.startswith('list/'):
            return httpx.Response(200, json=[self.descriptor(h) for h in self.blobs])

        if request.method == 'HEAD':
            if self.head_status is not None:
                return httpx.Response(self.head_status)
            return httpx.Response(200 if path in self.blobs else 404)

        if request.method == 'DELETE':
            if path not in self.blobs:
                return httpx.Response(404, text='not found')
            del self.blobs[path]
            return httpx.Response(200)

        if request.method == 'GET':
            if self.download_status != 200:
                return httpx.Response(self.download_status, text='server error')
            if self.redirect_downloads_to:
                return httpx.Response(302, headers={'Location': f"{self.redirect_downloads_to}/{path}"})
            if path not in self.blobs:
                return httpx.Response(404, text='not found')
            data = self.blobs[path]
            if self.corrupt_downloads:
                data = data[::-1] + b'x'
            return httpx.Response(200, content=data)

        return httpx.Response(405)


class FakeNetwork:
    """Routes requests to fake servers by host; unknown hosts are unreachable."""

    def __init__(self):
        self.servers: dict[str, FakeBlossomServer] = {}

    def add(self, host: str, **kwargs) -> FakeBlossomServer:
        server = FakeBlossomServer(host, **kwargs)
        self.servers[host] = server
        return server

    def _handle(self, request: httpx.Request) -> httpx.Response:
        server = self.servers.get(request.url.host)
        if server is None:
            raise httpx.ConnectError(f"Cannot connect to {request.url.host}", request=request)
        return server.handle(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


def decode_auth_header(request: httpx.Request) -> dict:
    """Decode the signed event carried in a request's Authorization header."""
    scheme, encoded = request.headers['Authorization'].split(' ', 1)
    assert scheme == 'Nostr'
    return json.loads(base64.b64decode(encoded))


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def client(network):
    """BlossomClient wired to the fake network, reporting progress on every chunk."""
    return BlossomClient(chunk_size=16, progress_interval=0, transport=network.transport)


@pytest.fixture
def signer():
    return NostrSigner(TEST_SECRET_KEY)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .blossom directory
    """
    config_dir = tmp_path / '.blossom'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, monkeypatch):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    monkeypatch.delenv('BLOSSOM_SECRET_KEY', raising=False)
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing blob uploads')
    return file_path


@pytest.fixture
def multiple_sample_files(tmp_path):
    """
    Create multiple sample files for testing batch operations.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        List of Paths to sample files
    """
    files = []
    for i in range(3):
        file_path = tmp_path / f'test{i}.txt'
        file_path.write_text(f'Sample content {i}')
        files.append(file_path)
    return files
