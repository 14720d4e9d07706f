"""
Ratebook - central bank exchange rate ingestion, history and conversion.
"""

__version__ = "1.2.0"
