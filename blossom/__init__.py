"""Content addressed blob transfer client for Blossom servers."""

from blossom.auth import AuthAction, CapabilityToken, issue_token
from blossom.blossom_client import BlossomClient
from blossom.download import download_from_servers
from blossom.hashing import compute_file_sha256
from blossom.schemas import BlobDescriptor
from blossom.signer import NostrSigner
from blossom.upload import upload_to_servers
from blossom.utils import get_hash_from_url

__all__ = [
    "AuthAction",
    "BlobDescriptor",
    "BlossomClient",
    "CapabilityToken",
    "NostrSigner",
    "compute_file_sha256",
    "download_from_servers",
    "get_hash_from_url",
    "issue_token",
    "upload_to_servers",
]
