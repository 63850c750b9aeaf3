"""Periodic draw/announce loop.

Every tick picks up giveaways whose close time has passed and that have
not been announced yet, draws the ones still open and publishes results.
The guarded writes in the store make each step safe to repeat: a failed
publish is simply tried again on the next tick with the winners that were
already persisted.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Iterable, Optional, Set

from bot import messages
from core import SchedulerDefaults, get_logger
from database.models import Giveaway
from database.repositories import GiveawayRepository, ParticipantRepository, WinnerRepository
from services.lifecycle import DrawOutcome, GiveawayService

logger = get_logger(__name__)


class AnnounceResult(str, Enum):
    ANNOUNCED = "announced"
    NOT_FOUND = "not_found"
    CANCELED = "canceled"
    NOT_ENDED = "not_ended"
    NO_WINNERS = "no_winners"
    FAILED = "failed"


class DrawScheduler:
    """Owns the periodic task that drives due giveaways to their outcome."""

    def __init__(
        self,
        service: GiveawayService,
        admin_ids: Iterable[int] = (),
        interval: float = SchedulerDefaults.TICK_SECONDS,
        publish_timeout: float = SchedulerDefaults.PUBLISH_TIMEOUT,
    ) -> None:
        self.service = service
        self.gateway = service.gateway
        self.admin_ids = tuple(admin_ids)
        self.interval = interval
        self.publish_timeout = publish_timeout
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._tick_lock = asyncio.Lock()
        self._notifications: Set[asyncio.Task] = set()

    # --- Lifecycle --------------------------------------------------------

    async def start(self) -> None:
        if self.running:
            logger.warning("Draw scheduler is already running")
            return
        self.running = True
        self._task = asyncio.create_task(self._loop(), name="draw-scheduler")
        logger.info(f"Draw scheduler started (interval {self.interval}s)")

    async def stop(self) -> None:
        if not self.running:
            return
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.flush_notifications()
        logger.info("Draw scheduler stopped")

    async def _loop(self) -> None:
        while self.running:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unexpected error in draw scheduler tick")
            await asyncio.sleep(self.interval)

    # --- Tick -------------------------------------------------------------

    async def tick(self) -> int:
        """Process all due giveaways once.

        Returns:
            Number of giveaways announced during this tick
        """
        if self._tick_lock.locked():
            logger.warning("Previous tick still running, skipping")
            return 0

        async with self._tick_lock:
            now = self.service.clock()
            try:
                due = await GiveawayRepository.list_due(now)
            except Exception:
                logger.exception("Could not load due giveaways")
                return 0

            announced = 0
            for giveaway in due:
                try:
                    if await self._process(giveaway):
                        announced += 1
                except Exception:
                    logger.exception(f"Giveaway #{giveaway.id}: processing failed, will retry next tick")
            return announced

    async def _process(self, giveaway: Giveaway) -> bool:
        if not giveaway.ended:
            outcome = await self.service.draw(giveaway.id)
            if outcome is DrawOutcome.NOT_DUE:
                return False
        return await self._announce(giveaway.id) is AnnounceResult.ANNOUNCED

    async def _announce(self, giveaway_id: int, force: bool = False) -> AnnounceResult:
        # Always re-read: the winners batch on disk is the only input to publish
        giveaway = await GiveawayRepository.get(giveaway_id)
        if giveaway is None:
            return AnnounceResult.NOT_FOUND
        if giveaway.canceled:
            return AnnounceResult.CANCELED
        if not giveaway.ended:
            return AnnounceResult.NOT_ENDED
        if giveaway.announced and not force:
            return AnnounceResult.ANNOUNCED

        winners = await WinnerRepository.list_for(giveaway_id)
        if winners:
            text = messages.winners_announcement(giveaway, winners)
        elif force:
            return AnnounceResult.NO_WINNERS
        elif await ParticipantRepository.count(giveaway_id) == 0:
            text = messages.empty_announcement(giveaway)
        else:
            logger.error(
                f"Giveaway #{giveaway_id} is ended with participants but no winners stored; "
                "leaving it for inspection and retrying next tick"
            )
            return AnnounceResult.NO_WINNERS

        if not await self._publish(giveaway.chat_id, text, giveaway_id):
            return AnnounceResult.FAILED

        if await self.service.mark_announced(giveaway_id):
            logger.info(f"Giveaway #{giveaway_id} announced ({len(winners)} winner(s))")
        elif force:
            logger.info(f"Giveaway #{giveaway_id} re-announced on operator request")

        fresh = await GiveawayRepository.get(giveaway_id)
        self._send_proofs(fresh or giveaway)
        return AnnounceResult.ANNOUNCED

    async def _publish(self, chat_id: int, text: str, giveaway_id: int) -> bool:
        try:
            message_id = await asyncio.wait_for(
                self.gateway.send_public(chat_id, text),
                timeout=self.publish_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Giveaway #{giveaway_id}: publish timed out after {self.publish_timeout}s")
            return False
        if message_id is None:
            logger.warning(f"Giveaway #{giveaway_id}: publish rejected, will retry")
            return False
        return True

    # --- Operator actions ---------------------------------------------------

    async def announce(self, giveaway_id: int) -> AnnounceResult:
        """Publish the stored result on operator request.

        Runs under the tick lock so it never races a scheduled announce.
        An already announced giveaway is published again but keeps its
        original ``announced_at``.
        """
        async with self._tick_lock:
            return await self._announce(giveaway_id, force=True)

    # --- Proof notifications -------------------------------------------------

    def _send_proofs(self, giveaway: Giveaway) -> None:
        text = messages.proof(giveaway, self.service.timezone)
        for admin_id in self.admin_ids:
            task = asyncio.create_task(self._send_proof(admin_id, giveaway.id, text))
            self._notifications.add(task)
            task.add_done_callback(self._notifications.discard)

    async def _send_proof(self, admin_id: int, giveaway_id: int, text: str) -> None:
        try:
            delivered = await asyncio.wait_for(
                self.gateway.send_private(admin_id, text),
                timeout=self.publish_timeout,
            )
        except Exception as e:
            logger.warning(f"Giveaway #{giveaway_id}: proof to admin {admin_id} failed: {e}")
            return
        if not delivered:
            logger.warning(f"Giveaway #{giveaway_id}: proof to admin {admin_id} not delivered")

    async def flush_notifications(self) -> None:
        """Wait for outstanding proof deliveries."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)
