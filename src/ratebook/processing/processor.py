"""
Rate Processor - validate an upstream envelope and persist its records.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ratebook.models import TableType
from ratebook.processing.validator import RateValidator
from ratebook.store.base import BaseRateStore

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    saved: int = 0
    failed: int = 0


class RateProcessor:
    """
    Validates and upserts the rates of one currency.

    Validation failures are counted per entry and never abort the batch.
    StorageError propagates to the caller.
    """

    def __init__(self, store: BaseRateStore, validator: RateValidator | None = None):
        self.store = store
        self.validator = validator or RateValidator()

    async def process_and_save(
        self,
        response: Any,
        table_type: str | TableType
    ) -> ProcessResult:
        batch = self.validator.normalize(response, table_type)
        result = ProcessResult(failed=batch.failed)

        for record in batch.records:
            await self.store.upsert(record)
            result.saved += 1

        if result.failed:
            total = result.saved + result.failed
            code = response.get("code") if isinstance(response, dict) else "unknown"
            logger.warning(
                f"Rate processing completed for {code}: "
                f"{result.saved}/{total} saved, {result.failed} failed validation"
            )

        return result
