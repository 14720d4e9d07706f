"""
httpx-based Transport
"""

import logging
from typing import Any

import httpx

from ratebook.providers.base import Transport, TransportError

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """
    Async HTTP transport backed by httpx.

    Args:
        transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
    """

    PROVIDER_NAME = "nbp"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        params: dict[str, str] | None = None,
    ) -> Any | None:
        request_headers = {"Accept": "application/json", **(headers or {})}

        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                transport=self._transport
            ) as client:
                response = await client.get(url, headers=request_headers, params=params)

            if response.status_code == 404:
                logger.info(f"No data available for URL: {url}")
                return None

            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise TransportError(
                message="Request timeout",
                provider=self.PROVIDER_NAME,
                error_type="TIMEOUT",
                details={"url": url, "timeout_seconds": timeout}
            ) from e

        except httpx.HTTPStatusError as e:
            raise TransportError(
                message=f"HTTP error: {e.response.status_code}",
                provider=self.PROVIDER_NAME,
                error_type=f"HTTP_{e.response.status_code}",
                details={"url": str(e.request.url)}
            ) from e

        except httpx.HTTPError as e:
            raise TransportError(
                message=f"Network error: {e}",
                provider=self.PROVIDER_NAME,
                error_type="NETWORK",
                details={"url": url}
            ) from e

        except ValueError as e:
            raise TransportError(
                message=f"Malformed response body: {e}",
                provider=self.PROVIDER_NAME,
                error_type="PARSE_ERROR",
                details={"url": url}
            ) from e
