"""Domain exceptions for macrodash."""

from __future__ import annotations


class MacroDashError(Exception):
    """Base class for all macrodash errors."""


class DataProviderError(MacroDashError):
    """An external data provider could not deliver usable content."""


class FetchTimeoutError(DataProviderError):
    """The deadline elapsed before the provider responded."""

    def __init__(self, url: str, timeout_seconds: float) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Request timed out after {int(timeout_seconds * 1000)}ms")


class TransportFailureError(DataProviderError):
    """Non-success status, connection failure or malformed content."""


class MissingCredentialError(DataProviderError):
    """A provider requires an access credential that is not configured."""


class InsufficientHistoryError(MacroDashError):
    """Merged price history is empty or does not reach back far enough."""


class NoOverlapError(MacroDashError):
    """Two series share no aligned dates."""


class CacheUnavailableError(MacroDashError):
    """The cache snapshot store could not be read or written."""
