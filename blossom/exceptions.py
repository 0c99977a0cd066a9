"""Custom exception classes for the Blossom transfer client."""

from typing import List, Optional


class BlossomError(Exception):
    """
    Base exception class for all blob transfer errors.
    """
    pass


class ConfigurationError(BlossomError):
    """
    Raised when a call is made with unusable configuration.
    """
    pass


class NoServersConfiguredError(ConfigurationError):
    """
    Raised when an operation is given an empty server list.
    """

    def __init__(self, message: str = "No servers were provided."):
        super().__init__(message)


class SigningError(BlossomError):
    """
    Raised when an authorization event cannot be signed.
    """
    pass


class TransferCancelledError(BlossomError):
    """
    Raised when a caller cancels an in-flight transfer.
    """
    pass


class RemoteError(BlossomError):
    """
    Raised when a server answers with a non-success status or cannot be reached.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadError(RemoteError):
    """
    Raised when a blob upload to a single server fails.
    """
    pass


class DownloadError(RemoteError):
    """
    Raised when a blob download from a single server fails.
    """
    pass


class AllServersFailedError(BlossomError):
    """
    Raised when every server in a fallback chain failed.

    last_error is the failure of the last server attempted; errors holds
    (server, error) for every attempt in order.
    """

    def __init__(self, message: str, last_error: Exception, errors: List[tuple]):
        super().__init__(message)
        self.last_error = last_error
        self.errors = errors
