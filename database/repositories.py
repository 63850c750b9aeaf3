"""Database access layer helpers."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

import aiosqlite

from database.base_repository import BaseRepository
from database.models import GIVEAWAY_COLUMNS, Giveaway, Participant, Winner

_SELECT_GIVEAWAY = f"SELECT {', '.join(GIVEAWAY_COLUMNS)} FROM giveaways"
_SELECT_PARTICIPANTS = "SELECT user_id, name, joined_at FROM participants WHERE giveaway_id=? ORDER BY user_id"


def _participant(row) -> Participant:
    return Participant(user_id=row[0], name=row[1], joined_at=row[2])


class GiveawayRepository(BaseRepository):
    """Repository for giveaway records and their state flags."""

    @staticmethod
    async def create(
        chat_id: int,
        message_id: Optional[int],
        prize: str,
        sponsor: str,
        winners: int,
        end_time: int,
        created_at: int,
        seed: str,
        seed_hash: str,
    ) -> int:
        """Insert an open giveaway and return its id."""
        return await BaseRepository.insert(
            """
            INSERT INTO giveaways (
                chat_id, message_id, prize, sponsor, winners, end_time,
                created_at, seed, seed_hash, ended, canceled, announced
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 0, 0)
            """,
            (chat_id, message_id, prize, sponsor, winners, end_time, created_at, seed, seed_hash),
        )

    @staticmethod
    async def get(giveaway_id: int) -> Optional[Giveaway]:
        row = await BaseRepository.fetch_one(f"{_SELECT_GIVEAWAY} WHERE id=?", (giveaway_id,))
        return Giveaway.from_row(row) if row else None

    @staticmethod
    async def list_recent(limit: int) -> List[Giveaway]:
        rows = await BaseRepository.fetch_all(f"{_SELECT_GIVEAWAY} ORDER BY id DESC LIMIT ?", (limit,))
        return [Giveaway.from_row(row) for row in rows]

    @staticmethod
    async def list_due(now: int) -> List[Giveaway]:
        """Giveaways past close time that still need a draw or an announcement."""
        rows = await BaseRepository.fetch_all(
            f"{_SELECT_GIVEAWAY} WHERE canceled=0 AND end_time<=? AND announced=0 ORDER BY end_time, id",
            (now,),
        )
        return [Giveaway.from_row(row) for row in rows]

    @staticmethod
    async def cancel(giveaway_id: int, reason: str, now: int) -> bool:
        """Cancel an open giveaway. Returns False if it already ended."""
        affected = await BaseRepository.execute(
            """
            UPDATE giveaways
            SET canceled=1, ended=1, ended_at=?, cancel_reason=?
            WHERE id=? AND ended=0
            """,
            (now, reason, giveaway_id),
        )
        return affected == 1

    @staticmethod
    async def record_draw(
        giveaway_id: int,
        choose: Callable[[List[Participant]], Sequence[Participant]],
        now: int,
    ) -> Optional[Tuple[List[Participant], List[Participant]]]:
        """Close the giveaway, select winners and store them in one transaction.

        The entrant list is read after ``ended=1`` is written under the
        write lock, so an entry either made it in before the close (and is
        drawn) or is refused by the ended guard in ``ParticipantRepository.add``.

        Returns:
            ``(entrants, winners)``, or None without writing anything if
            the giveaway is already ended or canceled
        """
        drawn: List[Tuple[List[Participant], List[Participant]]] = []

        async def store_winners(conn: aiosqlite.Connection) -> None:
            cursor = await conn.execute(_SELECT_PARTICIPANTS, (giveaway_id,))
            entrants = [_participant(row) async for row in cursor]
            winners = list(choose(entrants)) if entrants else []
            if winners:
                await conn.executemany(
                    "INSERT INTO winners (giveaway_id, user_id, name, position) VALUES (?, ?, ?, ?)",
                    [
                        (giveaway_id, winner.user_id, winner.name, position)
                        for position, winner in enumerate(winners, start=1)
                    ],
                )
            drawn.append((entrants, winners))

        matched = await BaseRepository.guarded_transaction(
            guard=(
                "UPDATE giveaways SET ended=1, ended_at=? WHERE id=? AND ended=0 AND canceled=0",
                (now, giveaway_id),
            ),
            then=store_winners,
        )
        return drawn[0] if matched else None

    @staticmethod
    async def mark_announced(giveaway_id: int, now: int) -> bool:
        affected = await BaseRepository.execute(
            """
            UPDATE giveaways
            SET announced=1, announced_at=?
            WHERE id=? AND ended=1 AND canceled=0 AND announced=0
            """,
            (now, giveaway_id),
        )
        return affected == 1


class ParticipantRepository(BaseRepository):
    """Repository for giveaway entries."""

    @staticmethod
    async def add(giveaway_id: int, user_id: int, name: str, now: int) -> bool:
        """Insert an entry if absent and the giveaway is still accepting entries.

        Returns:
            True if a new row was written
        """
        affected = await BaseRepository.execute(
            """
            INSERT INTO participants (giveaway_id, user_id, name, joined_at)
            SELECT id, ?, ?, ? FROM giveaways
            WHERE id=? AND ended=0 AND canceled=0 AND end_time>?
            ON CONFLICT(giveaway_id, user_id) DO NOTHING
            """,
            (user_id, name, now, giveaway_id, now),
        )
        return affected == 1

    @staticmethod
    async def exists(giveaway_id: int, user_id: int) -> bool:
        value = await BaseRepository.fetch_value(
            "SELECT 1 FROM participants WHERE giveaway_id=? AND user_id=?",
            (giveaway_id, user_id),
        )
        return value is not None

    @staticmethod
    async def count(giveaway_id: int) -> int:
        value = await BaseRepository.fetch_value(
            "SELECT COUNT(*) FROM participants WHERE giveaway_id=?",
            (giveaway_id,),
        )
        return int(value or 0)

    @staticmethod
    async def list_for(giveaway_id: int) -> List[Participant]:
        rows = await BaseRepository.fetch_all(_SELECT_PARTICIPANTS, (giveaway_id,))
        return [_participant(row) for row in rows]


class WinnerRepository(BaseRepository):
    """Repository for drawn winners (read-only after the draw)."""

    @staticmethod
    async def list_for(giveaway_id: int) -> List[Winner]:
        rows = await BaseRepository.fetch_all(
            "SELECT user_id, name, position FROM winners WHERE giveaway_id=? ORDER BY position ASC",
            (giveaway_id,),
        )
        return [Winner(user_id=row[0], name=row[1], position=row[2]) for row in rows]


class SettingsRepository(BaseRepository):
    """Key/value operator settings."""

    @staticmethod
    async def set(key: str, value: object) -> None:
        await BaseRepository.execute(
            """
            INSERT INTO settings (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, str(value)),
        )

    @staticmethod
    async def get(key: str) -> Optional[str]:
        return await BaseRepository.fetch_value("SELECT value FROM settings WHERE key=?", (key,))
