"""Database schema migrations."""

from __future__ import annotations

import aiosqlite

from core import get_logger
from core.exceptions import DatabaseError
from .connection import OptimizedSQLitePool

logger = get_logger(__name__)


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS giveaways (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        chat_id INTEGER NOT NULL,
        message_id INTEGER,
        prize TEXT NOT NULL,
        sponsor TEXT NOT NULL,
        winners INTEGER NOT NULL,
        end_time INTEGER NOT NULL,
        ended INTEGER NOT NULL DEFAULT 0,
        created_at INTEGER NOT NULL,
        ended_at INTEGER,
        seed TEXT,
        seed_hash TEXT,
        canceled INTEGER NOT NULL DEFAULT 0,
        cancel_reason TEXT,
        announced INTEGER NOT NULL DEFAULT 0,
        announced_at INTEGER
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS participants (
        giveaway_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        joined_at INTEGER NOT NULL,
        PRIMARY KEY (giveaway_id, user_id),
        FOREIGN KEY (giveaway_id) REFERENCES giveaways(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS winners (
        giveaway_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        position INTEGER NOT NULL,
        FOREIGN KEY (giveaway_id) REFERENCES giveaways(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT
    );
    """,
)

INDEX_SQL: tuple[str, ...] = (
    "CREATE INDEX IF NOT EXISTS idx_giveaways_due ON giveaways(canceled, announced, end_time);",
    "CREATE INDEX IF NOT EXISTS idx_winners_giveaway ON winners(giveaway_id, position);",
)

# Columns added after the first release; older databases get them on startup
LATE_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("giveaways", "message_id", "INTEGER"),
    ("giveaways", "seed", "TEXT"),
    ("giveaways", "seed_hash", "TEXT"),
    ("giveaways", "canceled", "INTEGER NOT NULL DEFAULT 0"),
    ("giveaways", "cancel_reason", "TEXT"),
    ("giveaways", "announced", "INTEGER NOT NULL DEFAULT 0"),
    ("giveaways", "announced_at", "INTEGER"),
    ("winners", "position", "INTEGER NOT NULL DEFAULT 0"),
)

# Fills a late column on rows written before it existed; winners were ranked by insertion order
BACKFILL_SQL: dict[tuple[str, str], str] = {
    ("winners", "position"): """
        UPDATE winners SET position = (
            SELECT COUNT(*) FROM winners AS earlier
            WHERE earlier.giveaway_id = winners.giveaway_id AND earlier.rowid <= winners.rowid
        )
        WHERE position = 0
    """,
}


async def _existing_columns(conn: aiosqlite.Connection, table: str) -> set[str]:
    cursor = await conn.execute(f"PRAGMA table_info({table})")
    return {row[1] async for row in cursor}


async def run_migrations(pool: OptimizedSQLitePool) -> None:
    async with pool.connection() as conn:
        await conn.execute("BEGIN")
        try:
            for statement in SCHEMA_SQL:
                await conn.execute(statement)

            for table, column, column_type in LATE_COLUMNS:
                if column not in await _existing_columns(conn, table):
                    await conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
                    logger.info(f"Added column {table}.{column}")
                    backfill = BACKFILL_SQL.get((table, column))
                    if backfill:
                        await conn.execute(backfill)

            for statement in INDEX_SQL:
                await conn.execute(statement)
        except aiosqlite.Error as e:
            await conn.rollback()
            raise DatabaseError(f"Migration failed: {e}") from e
        except Exception:
            await conn.rollback()
            raise
        else:
            await conn.commit()
