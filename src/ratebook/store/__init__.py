"""
Ratebook Rate Storage Module
"""

from ratebook.store.base import BaseRateStore, StorageError
from ratebook.store.postgres import PostgresRateStore

__all__ = [
    "BaseRateStore",
    "StorageError",
    "PostgresRateStore",
]
