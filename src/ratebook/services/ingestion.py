"""
Rate Ingestion Orchestrator

Run flow:
    load settings
    → for each enabled currency: fetch series → validate + persist
    → cleanup (if enabled) → clear cache → stamp last update

A failure in one currency is recorded and never stops the others. Only an
exception escaping the per-currency handling marks the run unsuccessful.
"""

import logging
from datetime import datetime, timezone

from ratebook.cache import RateCache
from ratebook.models import IngestionResult, ModuleSettings, TableType
from ratebook.processing.processor import RateProcessor
from ratebook.providers.nbp import DEFAULT_COUNT, NbpClient
from ratebook.services.maintenance import DataCleanupService
from ratebook.settings_store import BaseConfigStore

logger = logging.getLogger(__name__)

MESSAGE_ALL_UPDATED = "All rates updated successfully"
MESSAGE_PARTIAL = "Updated with some errors"


class RateIngestionOrchestrator:
    """Scheduled/on-demand update of all enabled currencies."""

    def __init__(
        self,
        client: NbpClient,
        processor: RateProcessor,
        cleanup: DataCleanupService,
        cache: RateCache,
        config_store: BaseConfigStore,
        series_length: int = DEFAULT_COUNT,
    ):
        self.client = client
        self.processor = processor
        self.cleanup = cleanup
        self.cache = cache
        self.config_store = config_store
        self.series_length = series_length

    async def update_rates(self) -> IngestionResult:
        result = IngestionResult()
        logger.info("🚀 Starting currency rate update")

        try:
            settings = await self.config_store.load()
            self.cache.ttl = settings.cache_ttl
            result.updated_count = await self._update_all_currencies(settings, result)

            if settings.auto_cleanup:
                self.cleanup.retention_days = settings.retention_days
                await self.cleanup.cleanup_old_data()

            self.cache.clear_all()
            await self.config_store.record_last_update(datetime.now(timezone.utc))

            result.success = True
            result.message = MESSAGE_PARTIAL if result.errors else MESSAGE_ALL_UPDATED
            logger.info(f"✅ Currency rates updated: {result.updated_count} rates saved")

        except Exception as e:
            result.success = False
            result.message = f"Fatal error: {e}"
            logger.critical(f"❌ Rate update fatal error: {e}", exc_info=True)

        return result

    async def _update_all_currencies(
        self,
        settings: ModuleSettings,
        result: IngestionResult
    ) -> int:
        total_updated = 0

        for currency_code in settings.enabled_currencies:
            currency_code = currency_code.strip()
            if not currency_code:
                continue

            try:
                updated = await self._update_single_currency(currency_code, settings.table_type)
            except Exception as e:
                result.errors.append(f"Error updating {currency_code}: {e}")
                logger.error(f"❌ Update failed for {currency_code}: {e}")
                continue

            total_updated += updated
            if updated == 0:
                result.errors.append(f"No data available for {currency_code}")

        return total_updated

    async def _update_single_currency(self, currency_code: str, table_type: TableType) -> int:
        response = await self.client.get_currency_rates(
            currency_code, table_type, self.series_length
        )
        if response is None:
            return 0

        processed = await self.processor.process_and_save(response, table_type)
        logger.info(f"{currency_code}: {processed.saved} saved, {processed.failed} rejected")
        return processed.saved
