"""
Ratebook services: ingestion, conversion, history and maintenance.
"""

from ratebook.services.catalog import CurrencyCatalog
from ratebook.services.converter import CurrencyConverter, PivotExchange, StoredRateExchange
from ratebook.services.history import HistoryService
from ratebook.services.ingestion import RateIngestionOrchestrator
from ratebook.services.maintenance import DataCleanupService, TableTypeSwitcher

__all__ = [
    "CurrencyCatalog",
    "CurrencyConverter",
    "DataCleanupService",
    "HistoryService",
    "PivotExchange",
    "RateIngestionOrchestrator",
    "StoredRateExchange",
    "TableTypeSwitcher",
]
