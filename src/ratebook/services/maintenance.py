"""
Data maintenance: retention pruning and table type switching.
"""

import logging
from datetime import date, timedelta
from typing import Callable

from ratebook.cache import RateCache
from ratebook.models import TableType
from ratebook.settings_store import BaseConfigStore
from ratebook.store.base import BaseRateStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30


class DataCleanupService:
    """Deletes rates older than the retention window."""

    def __init__(
        self,
        store: BaseRateStore,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.retention_days = retention_days
        self._today = today

    @property
    def retention_days(self) -> int:
        return self._retention_days

    @retention_days.setter
    def retention_days(self, days: int) -> None:
        self._retention_days = max(1, int(days))

    def cutoff_date(self) -> date:
        return self._today() - timedelta(days=self.retention_days)

    async def cleanup_old_data(self) -> int:
        """Delete expired rates. Storage failures are logged and reported as 0."""
        cutoff = self.cutoff_date()
        try:
            deleted = await self.store.delete_older_than(cutoff)
        except StorageError as e:
            logger.error(f"Error cleaning up old data: {e}")
            return 0

        logger.info(f"🧹 Old currency rates cleaned up (before {cutoff}): {deleted} removed")
        return deleted


class TableTypeSwitcher:
    """
    Changes the active table type.

    Rates of the abandoned table are meaningless under the new one, so a real
    change purges them, clears the cache and resets the enabled currencies.
    """

    def __init__(self, store: BaseRateStore, cache: RateCache, config_store: BaseConfigStore):
        self.store = store
        self.cache = cache
        self.config_store = config_store

    async def switch(self, new_table_type: str | TableType) -> bool:
        """
        Returns:
            True when the previous table's data was purged.

        Raises:
            ValueError: If the table type is unknown.
            StorageError: If the purge fails; settings are left unchanged.
        """
        new_table = TableType.coerce(new_table_type)
        settings = await self.config_store.load()
        old_table = settings.table_type

        if old_table is new_table:
            return False

        # Config only changes once the old table is purged.
        deleted = await self.store.delete_by_table_type(old_table)
        await self.config_store.save(
            settings.model_copy(update={"table_type": new_table, "enabled_currencies": []})
        )
        self.cache.clear_all()

        logger.warning(
            f"Table type changed from {old_table.value} to {new_table.value}: "
            f"{deleted} old rates removed, enabled currencies reset"
        )
        return True
