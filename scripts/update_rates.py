#!/usr/bin/env python3
"""
One-shot rate update.

Runs the same ingestion as the scheduled job and the /api/v1/cron endpoint,
prints the JSON result and exits non-zero when the run failed.

Example:
  python scripts/update_rates.py
"""

import asyncio
import logging
import sys

from ratebook.config import get_settings
from ratebook.container import build_services, create_pool

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("ratebook.update_rates")


async def run() -> bool:
    settings = get_settings()
    pool = await create_pool(settings)
    try:
        services = await build_services(pool, settings)
        result = await services.orchestrator.update_rates()
    finally:
        await pool.close()

    print(result.model_dump_json(indent=2))
    if not result.success:
        logger.error(f"❌ {result.message}")
    return result.success


def main() -> None:
    sys.exit(0 if asyncio.run(run()) else 1)


if __name__ == "__main__":
    main()
