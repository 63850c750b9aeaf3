"""Pytest configuration and fixtures."""

import asyncio
from dataclasses import replace
from typing import List, Optional, Set, Tuple

import pytest

from database import close_db_pool, init_db_pool, run_migrations
from database.models import Giveaway
from services.commitment import hash_seed
from services.lifecycle import GiveawayService
from services.scheduler import DrawScheduler

NOW = 1_768_000_000  # fixed wall clock for lifecycle tests
GROUP_ID = -100123
ADMIN_IDS = (111, 222)


class FakeClock:
    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeGateway:
    """In-memory MessagingGateway with switchable failures."""

    def __init__(self) -> None:
        self.public: List[Tuple[int, str, object]] = []
        self.edits: List[Tuple[int, int, str]] = []
        self.markups: List[Tuple[int, int, object]] = []
        self.private: List[Tuple[int, str]] = []
        self.non_members: Set[int] = set()
        self.fail_public = 0  # number of upcoming send_public calls to reject
        self.hang_public = False
        self.fail_private = False
        # Set to park check_membership until released, like a slow API round trip
        self.membership_gate: Optional[asyncio.Event] = None
        self.membership_started = asyncio.Event()
        self._next_id = 1000

    async def send_public(self, chat_id, text, reply_markup=None) -> Optional[int]:
        if self.hang_public:
            await asyncio.sleep(3600)
        if self.fail_public:
            self.fail_public -= 1
            return None
        self.public.append((chat_id, text, reply_markup))
        self._next_id += 1
        return self._next_id

    async def edit_public(self, chat_id, message_id, text, reply_markup=None) -> bool:
        self.edits.append((chat_id, message_id, text))
        return True

    async def edit_markup(self, chat_id, message_id, reply_markup) -> bool:
        self.markups.append((chat_id, message_id, reply_markup))
        return True

    async def send_private(self, user_id, text) -> bool:
        if self.fail_private:
            raise RuntimeError("private chat unavailable")
        self.private.append((user_id, text))
        return True

    async def check_membership(self, chat_id, user_id) -> bool:
        self.membership_started.set()
        if self.membership_gate is not None:
            await self.membership_gate.wait()
        return user_id not in self.non_members

    def public_texts(self) -> List[str]:
        return [text for _, text, _ in self.public]


@pytest.fixture
async def db(tmp_path):
    """Fresh migrated SQLite database behind the shared pool."""
    pool = await init_db_pool(
        database_path=str(tmp_path / "giveaway.sqlite"),
        pool_size=3,
        busy_timeout_ms=2000,
    )
    await run_migrations(pool)
    yield pool
    await close_db_pool()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def service(db, gateway, clock):
    return GiveawayService(gateway, timezone="Asia/Ho_Chi_Minh", clock=clock)


@pytest.fixture
def scheduler(service):
    return DrawScheduler(service, admin_ids=ADMIN_IDS, interval=5, publish_timeout=0.2)


@pytest.fixture
def open_giveaway(service):
    """Factory creating a giveaway that closes ``duration`` seconds from now."""

    async def factory(winners: int = 1, duration: int = 3600, prize: str = "Netflix 1 tháng") -> Giveaway:
        return await service.create_giveaway(
            chat_id=GROUP_ID,
            winners=winners,
            end_time=service.clock() + duration,
            prize=prize,
            sponsor="@sponsor",
        )

    return factory


async def join_users(service: GiveawayService, giveaway_id: int, user_ids) -> None:
    for user_id in user_ids:
        await service.join(giveaway_id, user_id, f"User {user_id}")


def make_record(**overrides) -> Giveaway:
    """Giveaway row built in memory, open by default."""
    record = Giveaway(
        id=7,
        chat_id=GROUP_ID,
        message_id=55,
        prize="Prize",
        sponsor="@s",
        winners=1,
        end_time=NOW + 3600,
        ended=False,
        created_at=NOW,
        ended_at=None,
        seed="ab" * 32,
        seed_hash=hash_seed("ab" * 32),
        canceled=False,
        cancel_reason=None,
        announced=False,
        announced_at=None,
    )
    return replace(record, **overrides)
