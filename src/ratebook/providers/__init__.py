"""
Ratebook Upstream Providers
"""

from ratebook.providers.base import Transport, TransportError
from ratebook.providers.nbp import NbpClient, normalize_count
from ratebook.providers.transport import HttpxTransport

__all__ = [
    "Transport",
    "TransportError",
    "HttpxTransport",
    "NbpClient",
    "normalize_count",
]
