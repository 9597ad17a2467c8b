"""
Error taxonomy for the extraction flow.

Every error carries a single user-facing message; none are retried.
"""


class AutoMMRError(Exception):
    """Base class for errors surfaced to the user as one message string."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedFileError(AutoMMRError):
    """Unsupported MIME type or unreadable upload."""


class ConfigurationError(AutoMMRError):
    """Missing or invalid API configuration."""


class ProviderError(AutoMMRError):
    """Upstream model failure: network, invalid key, non-2xx, empty answer."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseParseError(AutoMMRError):
    """The model answer could not be turned into JSON, even partially."""
