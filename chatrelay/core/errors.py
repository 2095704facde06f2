# chatrelay/core/errors.py

"""Error taxonomy shared by the relay services."""

from typing import Optional


class ChatRelayError(Exception):
    """Base class for all relay errors."""


class ValidationError(ChatRelayError):
    """A required input field is missing or empty."""


class UpstreamError(ChatRelayError):
    """The downstream query endpoint failed or returned an invalid shape."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(ChatRelayError):
    """A database operation failed for a reason other than a duplicate key."""


class ConfigurationError(ChatRelayError):
    """A required credential is missing or malformed."""


class LarkAPIError(ChatRelayError):
    """A call to the Lark Open API failed."""
