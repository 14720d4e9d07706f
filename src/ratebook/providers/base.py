"""
Base Transport Interface

A transport performs one HTTP GET and returns parsed JSON. A 404 is not an
error: the transport returns None to signal "no data for this lookup".
Every other failure raises TransportError.
"""

from abc import ABC, abstractmethod
from typing import Any


class TransportError(Exception):
    """Network, HTTP or decoding failure while talking to the upstream API."""

    def __init__(
        self,
        message: str,
        provider: str,
        error_type: str = "UNKNOWN",
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.provider = provider
        self.error_type = error_type
        self.details = details or {}


class Transport(ABC):
    """Pluggable HTTP GET capability used by the rate client."""

    PROVIDER_NAME: str = "base"

    @abstractmethod
    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        params: dict[str, str] | None = None,
    ) -> Any | None:
        """
        Fetch and decode a JSON document.

        Returns:
            Parsed JSON, or None when the upstream answered 404.

        Raises:
            TransportError: On timeout, network error, non-2xx status or
                malformed JSON.
        """
        pass
