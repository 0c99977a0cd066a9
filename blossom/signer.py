"""Nostr event signing with secp256k1 Schnorr keys."""

import hashlib
import json
import os
from typing import Union

from coincurve import PrivateKey

from blossom.exceptions import SigningError


def serialize_event(event: dict) -> bytes:
    """
    Canonical serialization used to derive a Nostr event id.

    Args:
        event: Event with pubkey, created_at, kind, tags and content

    Returns:
        UTF-8 compact JSON of [0, pubkey, created_at, kind, tags, content]
    """
    payload = [
        0,
        event['pubkey'],
        event['created_at'],
        event['kind'],
        event['tags'],
        event['content'],
    ]
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


def compute_event_id(event: dict) -> str:
    return hashlib.sha256(serialize_event(event)).hexdigest()


class NostrSigner:
    """
    Signs Nostr events with a secp256k1 secret key.

    The signer is owned by the caller and passed into every operation
    that needs an authorization token; it holds no other state.
    """

    def __init__(self, secret_key: Union[bytes, str]):
        """
        Args:
            secret_key: 32 raw bytes or a 64 character hex string

        Raises:
            SigningError: If the key is malformed or out of range
        """
        try:
            if isinstance(secret_key, str):
                secret_key = bytes.fromhex(secret_key.strip())
            if len(secret_key) != 32:
                raise ValueError(f"expected 32 bytes, got {len(secret_key)}")
            self._private_key = PrivateKey(secret_key)
        except (ValueError, TypeError) as e:
            raise SigningError(f"Invalid secret key: {e}") from e

        self.public_key = self._private_key.public_key_xonly.format().hex()

    @classmethod
    def generate(cls) -> 'NostrSigner':
        return cls(PrivateKey().secret)

    def sign(self, event: dict) -> dict:
        """
        Return a signed copy of an unsigned event.

        Args:
            event: Dict with created_at, kind, tags and content

        Returns:
            New dict with pubkey, id and sig filled in

        Raises:
            SigningError: If the event is incomplete or signing fails
        """
        signed = dict(event)
        signed['pubkey'] = self.public_key
        try:
            event_id = compute_event_id(signed)
            signature = self._private_key.sign_schnorr(bytes.fromhex(event_id), os.urandom(32))
        except (KeyError, TypeError, ValueError) as e:
            raise SigningError(f"Failed to sign event: {e}") from e

        signed['id'] = event_id
        signed['sig'] = signature.hex()
        return signed
