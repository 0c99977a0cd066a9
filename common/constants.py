"""Project-wide constants (auth event kind, token lifetime, transfer defaults)."""

BLOSSOM_AUTH_KIND: int = 24242
AUTH_SCHEME: str = "Nostr"
TOKEN_TTL_SECONDS: int = 10 * 60

STREAM_CHUNK_SIZE_BYTES: int = 64 * 1024
DEFAULT_TIMEOUT_SECONDS: float = 30.0
DEFAULT_PROGRESS_INTERVAL_SECONDS: float = 10.0

MEGABYTE: int = 1024 * 1024
