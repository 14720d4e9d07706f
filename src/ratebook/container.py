"""
Service wiring.

Builds the object graph shared by the HTTP surface, the scheduler job and
the command-line scripts. Services depending on runtime module settings
(conversion, history) are created per call from freshly loaded settings.
"""

import logging
from dataclasses import dataclass

import asyncpg
from asyncpg import Pool

from ratebook.cache import RateCache
from ratebook.config import Settings
from ratebook.models import ModuleSettings
from ratebook.processing import RateProcessor, RateValidator
from ratebook.providers import HttpxTransport, NbpClient, Transport
from ratebook.services import (
    CurrencyCatalog,
    CurrencyConverter,
    DataCleanupService,
    HistoryService,
    RateIngestionOrchestrator,
    TableTypeSwitcher,
)
from ratebook.settings_store import BaseConfigStore, PostgresConfigStore
from ratebook.store import BaseRateStore, PostgresRateStore

logger = logging.getLogger(__name__)


async def create_pool(settings: Settings) -> Pool:
    """Open the asyncpg pool; the caller owns it and must close it."""
    pool = await asyncpg.create_pool(
        host=settings.database_host,
        port=settings.database_port,
        database=settings.database_name,
        user=settings.database_user,
        password=settings.database_password,
        min_size=2,
        max_size=10,
        command_timeout=30,
        ssl=settings.database_ssl_mode,
    )
    logger.info(
        f"Database pool created: {settings.database_host}:{settings.database_port}"
        f"/{settings.database_name}"
    )
    return pool


@dataclass
class RateServices:
    """Long-lived collaborators of one running instance."""
    cache: RateCache
    client: NbpClient
    store: BaseRateStore
    config_store: BaseConfigStore
    orchestrator: RateIngestionOrchestrator
    catalog: CurrencyCatalog
    switcher: TableTypeSwitcher

    async def load_settings(self) -> ModuleSettings:
        return await self.config_store.load()

    def converter(self, settings: ModuleSettings) -> CurrencyConverter:
        return CurrencyConverter(self.store, settings)

    def history(self, settings: ModuleSettings) -> HistoryService:
        return HistoryService(self.store, settings)


def assemble_services(
    store: BaseRateStore,
    config_store: BaseConfigStore,
    settings: Settings,
    transport: Transport | None = None,
) -> RateServices:
    """Wire services around an existing store pair."""
    defaults = settings.module_defaults()
    cache = RateCache(
        ttl=defaults.cache_ttl,
        max_entries=settings.cache_max_entries,
    )
    client = NbpClient(
        cache,
        transport=transport or HttpxTransport(),
        base_url=settings.nbp_base_url,
        timeout=settings.http_timeout_seconds,
        max_attempts=settings.http_max_attempts,
        backoff_multiplier=settings.http_backoff_multiplier,
    )
    cleanup = DataCleanupService(store, retention_days=defaults.retention_days)

    return RateServices(
        cache=cache,
        client=client,
        store=store,
        config_store=config_store,
        orchestrator=RateIngestionOrchestrator(
            client=client,
            processor=RateProcessor(store, RateValidator()),
            cleanup=cleanup,
            cache=cache,
            config_store=config_store,
        ),
        catalog=CurrencyCatalog(client, cache),
        switcher=TableTypeSwitcher(store, cache, config_store),
    )


async def build_services(pool: Pool, settings: Settings) -> RateServices:
    """Create the PostgreSQL-backed services, ensuring schema and seeded settings."""
    store = PostgresRateStore(pool)
    config_store = PostgresConfigStore(pool, settings.module_defaults())

    await store.ensure_schema()
    module_settings = await config_store.seed_defaults()

    services = assemble_services(store, config_store, settings)
    services.cache.ttl = module_settings.cache_ttl
    logger.info(
        f"✅ Services ready: table {module_settings.table_type.value}, "
        f"currencies {','.join(module_settings.enabled_currencies) or '-'}"
    )
    return services
