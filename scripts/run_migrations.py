import asyncio

from ratebook.config import get_settings
from ratebook.container import create_pool
from ratebook.store.schema import apply_migrations, migration_files


async def run_migrations() -> None:
    pool = await create_pool(get_settings())
    try:
        async with pool.acquire() as conn:
            executed = await apply_migrations(conn)
    finally:
        await pool.close()
    print(f"Executed {executed} statements")


def main() -> None:
    scripts = migration_files()
    if not scripts:
        raise FileNotFoundError("No migrations packaged in ratebook/migrations")
    for script in scripts:
        print(f"Running migration: {script.name}")
    asyncio.run(run_migrations())


if __name__ == '__main__':
    main()
