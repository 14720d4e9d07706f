"""
Ratebook API Module
"""

from ratebook.api.routes import router
from ratebook.api.schemas import (
    CronResponse,
    HealthResponse,
    HistoryResponse,
    RateResponse,
)

__all__ = [
    "router",
    "CronResponse",
    "HealthResponse",
    "HistoryResponse",
    "RateResponse",
]
