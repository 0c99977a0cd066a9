"""Blossom authorization tokens (signed, time-boxed Nostr events)."""

import base64
import json
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from common.constants import AUTH_SCHEME, BLOSSOM_AUTH_KIND, TOKEN_TTL_SECONDS
from common.logging_config import get_logger

logger = get_logger(__name__)


class AuthAction(str, Enum):
    UPLOAD = "upload"
    LIST = "list"
    DELETE = "delete"


DEFAULT_CONTENT = {
    AuthAction.UPLOAD: "Upload blob",
    AuthAction.LIST: "List Blobs",
    AuthAction.DELETE: "Delete Blob",
}

# Payload keys an action requires, in tag order.
REQUIRED_PAYLOAD = {
    AuthAction.UPLOAD: (("size", "size"), ("x", "sha256"), ("name", "name")),
    AuthAction.LIST: (),
    AuthAction.DELETE: (("x", "sha256"),),
}


@dataclass(frozen=True)
class CapabilityToken:
    """A signed authorization event for exactly one action."""
    action: AuthAction
    event: dict

    @property
    def created_at(self) -> int:
        return self.event['created_at']

    @property
    def expiration(self) -> int:
        for tag in self.event['tags']:
            if tag[0] == 'expiration':
                return int(tag[1])
        raise KeyError('expiration')

    @property
    def encoded(self) -> str:
        raw = json.dumps(self.event, separators=(',', ':'), ensure_ascii=False)
        return base64.b64encode(raw.encode('utf-8')).decode('ascii')

    def authorization_header(self) -> dict:
        return {'Authorization': f'{AUTH_SCHEME} {self.encoded}'}


def issue_token(
    action: AuthAction,
    signer,
    payload: Optional[dict] = None,
    content: Optional[str] = None,
    unique: bool = False,
    now: Optional[int] = None
) -> CapabilityToken:
    """
    Build and sign an authorization event for one action.

    Args:
        action: upload, list or delete
        signer: Signing identity exposing sign(event) -> signed event
        payload: upload needs size, sha256 and name; delete needs sha256
        content: Human readable description placed in the event content
        unique: Add a random nonce tag so identical requests never yield identical tokens
        now: Issue time in unix seconds (defaults to the current time)

    Returns:
        CapabilityToken expiring TOKEN_TTL_SECONDS after issue

    Raises:
        ValueError: If the payload lacks a field the action requires
        SigningError: If the signer cannot sign the event
    """
    action = AuthAction(action)
    payload = payload or {}
    created_at = int(time.time()) if now is None else int(now)

    tags = [["t", action.value]]
    for tag_name, key in REQUIRED_PAYLOAD[action]:
        if payload.get(key) is None:
            raise ValueError(f"{action.value} token requires '{key}'")
        tags.append([tag_name, str(payload[key])])
    if unique:
        tags.append(["nonce", secrets.token_hex(8)])
    tags.append(["expiration", str(created_at + TOKEN_TTL_SECONDS)])

    event = {
        "created_at": created_at,
        "kind": BLOSSOM_AUTH_KIND,
        "content": content or DEFAULT_CONTENT[action],
        "tags": tags,
    }
    signed = signer.sign(event)
    logger.debug(f"Issued {action.value} token [id={signed.get('id')}]")
    return CapabilityToken(action=action, event=signed)


def create_upload_token(signer, size: int, sha256: str, name: str,
                        description: Optional[str] = None, unique: bool = False) -> CapabilityToken:
    return issue_token(
        AuthAction.UPLOAD,
        signer,
        {"size": size, "sha256": sha256, "name": name},
        content=description,
        unique=unique
    )


def create_list_token(signer) -> CapabilityToken:
    return issue_token(AuthAction.LIST, signer)


def create_delete_token(signer, sha256: str) -> CapabilityToken:
    return issue_token(AuthAction.DELETE, signer, {"sha256": sha256})
