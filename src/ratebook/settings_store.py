"""
Module Settings Store

Key/value persistence for the runtime ModuleSettings. On first load the
store is seeded from environment defaults, generating a cron token when
none is configured.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import asyncpg
from asyncpg import Pool

from ratebook.models import ModuleSettings
from ratebook.store.base import StorageError

logger = logging.getLogger(__name__)

CONFIG_TABLE = "currency_rate_config"


class ConfigurationError(Exception):
    """Module settings are missing or unreadable."""


def generate_token(length: int = 32) -> str:
    """Random hex token for the ingestion endpoint."""
    return secrets.token_hex(length)


class BaseConfigStore(ABC):
    """Source of truth for ModuleSettings."""

    @abstractmethod
    async def load(self) -> ModuleSettings:
        """
        Raises:
            ConfigurationError: If settings cannot be read.
        """

    @abstractmethod
    async def save(self, settings: ModuleSettings) -> None:
        pass

    async def record_last_update(self, when: datetime | None = None) -> ModuleSettings:
        """Stamp the time of the last successful ingestion run."""
        settings = await self.load()
        updated = settings.model_copy(
            update={"last_update": when or datetime.now(timezone.utc)}
        )
        await self.save(updated)
        return updated


class PostgresConfigStore(BaseConfigStore):
    """Settings kept in the ``currency_rate_config`` key/value table."""

    def __init__(self, pool: Pool, defaults: ModuleSettings):
        self._pool = pool
        self._defaults = defaults

    async def seed_defaults(self) -> ModuleSettings:
        """Write default values for every key that is not stored yet."""
        defaults = self._defaults
        if not defaults.cron_token:
            defaults = defaults.model_copy(update={"cron_token": generate_token()})

        async with self._pool.acquire() as conn:
            await conn.executemany(
                f"""
                INSERT INTO {CONFIG_TABLE} (key, value) VALUES ($1, $2)
                ON CONFLICT (key) DO NOTHING
                """,
                list(defaults.to_mapping().items())
            )
        logger.info("Module settings seeded")
        return await self.load()

    async def load(self) -> ModuleSettings:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(f"SELECT key, value FROM {CONFIG_TABLE}")
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise ConfigurationError(f"Cannot read module settings: {e}") from e

        if not rows:
            raise ConfigurationError("Module settings have not been initialised")

        return ModuleSettings.from_mapping(
            {row["key"]: row["value"] for row in rows},
            defaults=self._defaults
        )

    async def save(self, settings: ModuleSettings) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(
                    f"""
                    INSERT INTO {CONFIG_TABLE} (key, value, updated_at)
                    VALUES ($1, $2, NOW())
                    ON CONFLICT (key) DO UPDATE SET
                        value = EXCLUDED.value,
                        updated_at = NOW()
                    """,
                    list(settings.to_mapping().items())
                )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StorageError(f"Cannot save module settings: {e}") from e
