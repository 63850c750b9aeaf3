"""Base repository pattern for database operations."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

import aiosqlite

from core.exceptions import RepositoryError
from database.connection import get_db_pool


class BaseRepository:
    """Base repository with common database operations."""

    @staticmethod
    async def execute(query: str, params: Sequence[Any] = ()) -> int:
        """Execute a write query and return the number of affected rows."""
        pool = get_db_pool()
        async with pool.connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.rowcount

    @staticmethod
    async def insert(query: str, params: Sequence[Any] = ()) -> int:
        """Execute an INSERT and return the new row id."""
        pool = get_db_pool()
        async with pool.connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    @staticmethod
    async def fetch_one(query: str, params: Sequence[Any] = ()) -> Optional[Tuple]:
        """Fetch a single row."""
        pool = get_db_pool()
        async with pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return await cursor.fetchone()

    @staticmethod
    async def fetch_all(query: str, params: Sequence[Any] = ()) -> List[Tuple]:
        """Fetch all rows."""
        pool = get_db_pool()
        async with pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return [row async for row in cursor]

    @staticmethod
    async def fetch_value(query: str, params: Sequence[Any] = ()) -> Optional[Any]:
        """Fetch a single value from a single row."""
        row = await BaseRepository.fetch_one(query, params)
        return row[0] if row else None

    @staticmethod
    async def guarded_transaction(
        guard: Tuple[str, Sequence[Any]],
        then: Optional[Callable[[aiosqlite.Connection], Awaitable[None]]] = None,
    ) -> bool:
        """Run a guarded write and its dependent work as one unit of work.

        The guard is a single UPDATE whose WHERE clause encodes the
        precondition. If it touches no row the transaction is rolled back
        and ``then`` never runs. Otherwise ``then`` gets the open
        connection: whatever it reads sees the state as of the guard, and
        whatever it writes commits or rolls back together with it.

        Returns:
            True if the guard matched and everything was committed
        """
        guard_query, guard_params = guard
        pool = get_db_pool()
        async with pool.connection() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                cursor = await conn.execute(guard_query, guard_params)
                if cursor.rowcount == 0:
                    await conn.rollback()
                    return False
                if then is not None:
                    await then(conn)
                await conn.commit()
                return True
            except aiosqlite.Error as e:
                await conn.rollback()
                raise RepositoryError(f"Guarded write failed: {e}") from e
            except Exception:
                await conn.rollback()
                raise
