"""
Ratebook Main Application Entry Point

Serves the rate API and runs the daily ingestion job.
"""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ratebook import __version__
from ratebook.api import router
from ratebook.config import Settings, get_settings
from ratebook.container import RateServices, build_services, create_pool

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


async def scheduled_job(services: RateServices) -> None:
    """Scheduled daily job wrapper."""
    logger.info("⏰ Scheduled rate update triggered")
    result = await services.orchestrator.update_rates()
    if result.success:
        logger.info(f"⏰ Scheduled job completed: {result.message} ({result.updated_count} rates)")
        for error in result.errors:
            logger.warning(f"⏰ {error}")
    else:
        logger.error(f"⏰ Scheduled job failed: {result.message}")


def create_scheduler(services: RateServices, settings: Settings) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)
    scheduler.add_job(
        scheduled_job,
        CronTrigger(
            hour=settings.scheduler_cron_hour,
            minute=settings.scheduler_cron_minute
        ),
        args=[services],
        id="daily_rate_update",
        name="Daily Rate Update",
        replace_existing=True
    )
    return scheduler


def create_app(services: RateServices | None = None, enable_scheduler: bool = True) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        services: Pre-built services; when omitted they are built on startup
            from a PostgreSQL pool.
        enable_scheduler: Run the daily ingestion job in-process.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        logger.info(f"🚀 Starting Ratebook v.{__version__}")

        pool = None
        if services is None:
            pool = await create_pool(settings)
            app.state.services = await build_services(pool, settings)
            logger.info("✅ Database connection pool initialized")
        else:
            app.state.services = services

        scheduler = None
        if enable_scheduler and settings.scheduler_enabled:
            scheduler = create_scheduler(app.state.services, settings)
            scheduler.start()
            logger.info(
                f"⏰ Scheduler started: Daily job at "
                f"{settings.scheduler_cron_hour:02d}:{settings.scheduler_cron_minute:02d} "
                f"{settings.scheduler_timezone}"
            )

        yield

        logger.info("🛑 Shutting down Ratebook")
        if scheduler:
            scheduler.shutdown()
            logger.info("⏰ Scheduler stopped")
        if pool is not None:
            await pool.close()
            logger.info("Database pool closed")
        logger.info("✅ Shutdown complete")

    app = FastAPI(
        title="Ratebook",
        description="Central bank exchange rate ingestion, history and conversion",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Ratebook",
            "version": __version__,
            "docs": "/docs",
            "api": {
                "cron": "/api/v1/cron?token=...",
                "history": "/api/v1/history",
                "convert": "/api/v1/convert?amount=...",
                "rates": "/api/v1/rates/{currency_code}",
                "currencies": "/api/v1/currencies/available",
                "health": "/api/v1/health"
            }
        }

    return app


# Create application instance
app = create_app()


def main():
    """Main entry point for running the server."""
    settings = get_settings()

    logger.info(f"Starting Ratebook server on {settings.api_host}:{settings.api_port}")

    uvicorn.run(
        "ratebook.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
