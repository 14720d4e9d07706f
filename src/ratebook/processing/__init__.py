"""
Ratebook Rate Processing Module
"""

from ratebook.processing.processor import ProcessResult, RateProcessor
from ratebook.processing.validator import (
    RateValidationError,
    RateValidator,
    ValidationBatch,
)

__all__ = [
    "RateValidator",
    "RateValidationError",
    "ValidationBatch",
    "RateProcessor",
    "ProcessResult",
]
