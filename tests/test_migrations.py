"""Schema migration tests."""

import aiosqlite
import pytest

from database import close_db_pool, init_db_pool, run_migrations
from database.base_repository import BaseRepository
from database.repositories import GiveawayRepository, SettingsRepository, WinnerRepository

LEGACY_SCHEMA = """
CREATE TABLE giveaways (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chat_id INTEGER NOT NULL,
    prize TEXT NOT NULL,
    sponsor TEXT NOT NULL,
    winners INTEGER NOT NULL,
    end_time INTEGER NOT NULL,
    ended INTEGER NOT NULL DEFAULT 0,
    created_at INTEGER NOT NULL,
    ended_at INTEGER
);
INSERT INTO giveaways (chat_id, prize, sponsor, winners, end_time, created_at)
VALUES (-100, 'Old prize', '@old', 1, 500, 100);
"""


@pytest.mark.asyncio
async def test_legacy_database_gets_late_columns(tmp_path):
    path = tmp_path / "legacy.sqlite"
    async with aiosqlite.connect(path) as conn:
        await conn.executescript(LEGACY_SCHEMA)
        await conn.commit()

    pool = await init_db_pool(str(path), pool_size=1, busy_timeout_ms=1000)
    try:
        await run_migrations(pool)
        await run_migrations(pool)  # idempotent

        [legacy] = await GiveawayRepository.list_due(1_000)
        assert legacy.prize == "Old prize"
        assert not legacy.canceled and not legacy.announced
        assert legacy.seed is None

        indexes = await BaseRepository.fetch_all(
            "SELECT name FROM sqlite_master WHERE type='index' AND name LIKE 'idx_%'"
        )
        assert {row[0] for row in indexes} == {"idx_giveaways_due", "idx_winners_giveaway"}
    finally:
        await close_db_pool()


# Schema written by the first (JavaScript) release of the bot
FIRST_RELEASE_SCHEMA = """
CREATE TABLE giveaways (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  chat_id INTEGER NOT NULL,
  message_id INTEGER NOT NULL,
  prize TEXT NOT NULL,
  sponsor TEXT NOT NULL,
  winners INTEGER NOT NULL,
  end_time INTEGER NOT NULL,
  ended INTEGER DEFAULT 0,
  created_at INTEGER NOT NULL,
  ended_at INTEGER,
  seed TEXT,
  seed_hash TEXT,
  canceled INTEGER DEFAULT 0,
  cancel_reason TEXT,
  announced INTEGER DEFAULT 0,
  announced_at INTEGER
);
CREATE TABLE participants (
  giveaway_id INTEGER NOT NULL,
  user_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  joined_at INTEGER NOT NULL,
  PRIMARY KEY (giveaway_id, user_id)
);
CREATE TABLE winners (
  giveaway_id INTEGER NOT NULL,
  user_id INTEGER NOT NULL,
  name TEXT NOT NULL
);
CREATE TABLE settings (
  key TEXT PRIMARY KEY,
  value TEXT
);
INSERT INTO giveaways (chat_id, message_id, prize, sponsor, winners, end_time, ended, created_at, ended_at, seed, seed_hash)
VALUES (-100, 10, 'Drawn', '@a', 3, 500, 1, 100, 500, 'aa', 'bb');
INSERT INTO giveaways (chat_id, message_id, prize, sponsor, winners, end_time, created_at, seed, seed_hash)
VALUES (-100, 11, 'Open', '@b', 1, 900, 200, 'cc', 'dd');
INSERT INTO winners (giveaway_id, user_id, name) VALUES (1, 30, 'C');
INSERT INTO winners (giveaway_id, user_id, name) VALUES (1, 10, 'A');
INSERT INTO winners (giveaway_id, user_id, name) VALUES (2, 99, 'Z');
INSERT INTO winners (giveaway_id, user_id, name) VALUES (1, 20, 'B');
INSERT INTO settings (key, value) VALUES ('default_group_id', '-100');
"""


@pytest.mark.asyncio
async def test_first_release_database_keeps_winner_order(tmp_path):
    path = tmp_path / "first_release.sqlite"
    async with aiosqlite.connect(path) as conn:
        await conn.executescript(FIRST_RELEASE_SCHEMA)
        await conn.commit()

    pool = await init_db_pool(str(path), pool_size=1, busy_timeout_ms=1000)
    try:
        await run_migrations(pool)
        await run_migrations(pool)

        # Positions follow insertion order within each giveaway
        assert [(w.user_id, w.position) for w in await WinnerRepository.list_for(1)] == [
            (30, 1),
            (10, 2),
            (20, 3),
        ]
        assert [(w.user_id, w.position) for w in await WinnerRepository.list_for(2)] == [(99, 1)]

        due = await GiveawayRepository.list_due(1_000)
        assert [g.prize for g in due] == ["Drawn", "Open"]
        assert due[0].ended and not due[0].announced
        assert await SettingsRepository.get("default_group_id") == "-100"
    finally:
        await close_db_pool()
