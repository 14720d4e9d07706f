"""
Schema migrations.

The SQL files shipped in ``ratebook/migrations`` are the single source of the
database schema. Every statement is idempotent, so applying all of them on
startup is safe.
"""

import logging
from importlib.resources import files

from asyncpg import Connection

logger = logging.getLogger(__name__)


def split_sql_statements(sql: str) -> list[str]:
    """Split a SQL script into statements.

    Handles:
    - Semicolons inside single-quoted strings
    - Line comments starting with --
    """
    statements: list[str] = []
    current: list[str] = []
    in_single_quote = False

    i = 0
    while i < len(sql):
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < len(sql) else ""

        if not in_single_quote and ch == '-' and nxt == '-':
            while i < len(sql) and sql[i] != '\n':
                i += 1
            continue

        if ch == "'":
            in_single_quote = not in_single_quote
        elif ch == ';' and not in_single_quote:
            statements.append(''.join(current).strip())
            current = []
            i += 1
            continue

        current.append(ch)
        i += 1

    statements.append(''.join(current).strip())
    return [s for s in statements if s]


def migration_files() -> list:
    """Packaged migration scripts in apply order."""
    directory = files("ratebook").joinpath("migrations")
    return sorted(
        (f for f in directory.iterdir() if f.name.endswith(".sql")),
        key=lambda f: f.name
    )


async def apply_migrations(conn: Connection) -> int:
    """Run every migration statement in one transaction; returns statements executed."""
    executed = 0
    async with conn.transaction():
        for script in migration_files():
            statements = split_sql_statements(script.read_text(encoding="utf-8"))
            for stmt in statements:
                await conn.execute(stmt)
            executed += len(statements)
            logger.info(f"Applied migration {script.name} ({len(statements)} statements)")
    return executed
