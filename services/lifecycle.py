"""Giveaway lifecycle: creation, entries, cancellation, draw and announce marks.

All state changes go through guarded writes in the repositories, so a
transition that already happened is reported back as a result value
instead of being applied twice.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional

from bot import keyboards, messages
from core import GiveawayDefaults, GiveawayState, SettingKeys, get_logger
from core.exceptions import (
    DeliveryError,
    GiveawayNotFoundError,
    InconsistentStateError,
    InvalidTransitionError,
    ValidationError,
)
from database.models import Giveaway, Participant, Winner
from database.repositories import (
    GiveawayRepository,
    ParticipantRepository,
    SettingsRepository,
    WinnerRepository,
)
from services.commitment import create_commitment, revealed_seed
from services.lottery import FairSelector
from services.messaging import MessagingGateway

logger = get_logger(__name__)

Clock = Callable[[], int]

TRANSITIONS: Dict[GiveawayState, FrozenSet[GiveawayState]] = {
    GiveawayState.OPEN: frozenset(
        {GiveawayState.CANCELED, GiveawayState.ENDED_DRAWN, GiveawayState.ENDED_EMPTY}
    ),
    GiveawayState.ENDED_DRAWN: frozenset({GiveawayState.ANNOUNCED}),
    GiveawayState.ENDED_EMPTY: frozenset({GiveawayState.ANNOUNCED}),
    GiveawayState.CANCELED: frozenset(),
    GiveawayState.ANNOUNCED: frozenset(),
}


def ensure_transition(giveaway_id: int, current: GiveawayState, target: GiveawayState) -> None:
    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Giveaway #{giveaway_id}: {current.value} -> {target.value} is not allowed"
        )


def unix_now() -> int:
    return int(time.time())


class JoinResult(str, Enum):
    JOINED = "joined"
    ALREADY_JOINED = "already_joined"
    NOT_FOUND = "not_found"
    CANCELED = "canceled"
    CLOSED = "closed"
    NOT_MEMBER = "not_member"


class CancelResult(str, Enum):
    CANCELED = "canceled"
    NOT_FOUND = "not_found"
    ALREADY_CANCELED = "already_canceled"
    ALREADY_ENDED = "already_ended"


class DrawOutcome(str, Enum):
    DRAWN = "drawn"
    EMPTY = "empty"
    NOT_DUE = "not_due"
    ALREADY_ENDED = "already_ended"


class GiveawayService:
    """Lifecycle operations over the record store and the messaging gateway."""

    def __init__(
        self,
        gateway: MessagingGateway,
        timezone: str = GiveawayDefaults.TIMEZONE,
        selector: Optional[FairSelector] = None,
        clock: Clock = unix_now,
    ) -> None:
        self.gateway = gateway
        self.timezone = timezone
        self.selector = selector or FairSelector()
        self.clock = clock

    # --- Read paths -------------------------------------------------------

    async def get(self, giveaway_id: int) -> Giveaway:
        giveaway = await GiveawayRepository.get(giveaway_id)
        if giveaway is None:
            raise GiveawayNotFoundError(f"Giveaway #{giveaway_id} not found")
        return giveaway

    async def history(self, limit: int = GiveawayDefaults.HISTORY_LIMIT) -> List[Giveaway]:
        return await GiveawayRepository.list_recent(limit)

    async def participant_count(self, giveaway_id: int) -> int:
        return await ParticipantRepository.count(giveaway_id)

    async def winners(self, giveaway_id: int) -> List[Winner]:
        return await WinnerRepository.list_for(giveaway_id)

    async def state_of(self, giveaway: Giveaway) -> GiveawayState:
        if giveaway.ended and not giveaway.canceled and not giveaway.announced:
            return giveaway.state(has_winners=bool(await self.winners(giveaway.id)))
        return giveaway.state(has_winners=False)

    async def verify_draw(self, giveaway: Giveaway) -> Optional[bool]:
        """Recompute the stored winners from the stored entrants.

        Returns None while the seed may not be revealed yet.
        """
        seed = revealed_seed(giveaway)
        if seed is None:
            return None
        entrants = await ParticipantRepository.list_for(giveaway.id)
        published = [winner.user_id for winner in await self.winners(giveaway.id)]
        if not entrants:
            return not published
        return self.selector.verify(seed, giveaway.id, entrants, giveaway.winners, published)

    async def default_group(self) -> Optional[int]:
        value = await SettingsRepository.get(SettingKeys.DEFAULT_GROUP_ID)
        return int(value) if value else None

    async def set_default_group(self, chat_id: int) -> None:
        await SettingsRepository.set(SettingKeys.DEFAULT_GROUP_ID, chat_id)
        logger.info(f"Default group set to {chat_id}")

    # --- Creation ---------------------------------------------------------

    async def create_giveaway(
        self,
        chat_id: int,
        winners: int,
        end_time: int,
        prize: str,
        sponsor: str,
    ) -> Giveaway:
        """Open a giveaway: commit to a seed, post it and store the record.

        Raises:
            ValidationError: If any field is invalid
            DeliveryError: If the post could not be sent to the group
        """
        now = self.clock()
        prize, sponsor = prize.strip(), sponsor.strip()
        if not GiveawayDefaults.MIN_WINNERS <= winners <= GiveawayDefaults.MAX_WINNERS:
            raise ValidationError("BAD_WINNERS")
        if end_time <= now:
            raise ValidationError("BAD_TIME", "Close time must be in the future")
        if not prize:
            raise ValidationError("BAD_PRIZE")
        if not sponsor:
            raise ValidationError("BAD_SPONSOR")

        # The commitment goes out with the post, before any entry exists
        commitment = create_commitment()
        text = messages.giveaway_post(
            prize=prize,
            sponsor=sponsor,
            winners=winners,
            end_time=end_time,
            seed_hash=commitment.seed_hash,
            participant_count=0,
            tz=self.timezone,
        )
        message_id = await self.gateway.send_public(chat_id, text, keyboards.join_keyboard())
        if message_id is None:
            raise DeliveryError(f"Could not post giveaway to chat {chat_id}")

        giveaway_id = await GiveawayRepository.create(
            chat_id=chat_id,
            message_id=message_id,
            prize=prize,
            sponsor=sponsor,
            winners=winners,
            end_time=end_time,
            created_at=now,
            seed=commitment.seed,
            seed_hash=commitment.seed_hash,
        )
        if not await self.gateway.edit_markup(chat_id, message_id, keyboards.join_keyboard(giveaway_id)):
            logger.error(f"Giveaway #{giveaway_id}: join button could not be attached")

        logger.info(f"Giveaway #{giveaway_id} created in {chat_id}, closes at {end_time}")
        return await self.get(giveaway_id)

    # --- Entries ----------------------------------------------------------

    async def join(self, giveaway_id: int, user_id: int, name: str) -> JoinResult:
        now = self.clock()
        giveaway = await GiveawayRepository.get(giveaway_id)
        if giveaway is None:
            return JoinResult.NOT_FOUND
        if giveaway.canceled:
            return JoinResult.CANCELED
        if giveaway.ended or giveaway.is_due(now):
            return JoinResult.CLOSED
        if not await self.gateway.check_membership(giveaway.chat_id, user_id):
            return JoinResult.NOT_MEMBER

        # The membership lookup is a network round trip; the close time may have passed
        if not await ParticipantRepository.add(giveaway_id, user_id, name or "User", self.clock()):
            if await ParticipantRepository.exists(giveaway_id, user_id):
                return JoinResult.ALREADY_JOINED
            # Closed or canceled between the check above and the insert
            return JoinResult.CLOSED

        await self._refresh_post(giveaway)
        return JoinResult.JOINED

    async def _refresh_post(self, giveaway: Giveaway) -> None:
        """Update the public counter; cosmetic, never retried."""
        if giveaway.message_id is None:
            return
        count = await ParticipantRepository.count(giveaway.id)
        await self.gateway.edit_public(
            giveaway.chat_id,
            giveaway.message_id,
            messages.giveaway_post_for(giveaway, count, self.timezone),
            keyboards.join_keyboard(giveaway.id),
        )

    # --- Transitions ------------------------------------------------------

    async def cancel(self, giveaway_id: int, reason: str) -> CancelResult:
        giveaway = await GiveawayRepository.get(giveaway_id)
        if giveaway is None:
            return CancelResult.NOT_FOUND
        if giveaway.canceled:
            return CancelResult.ALREADY_CANCELED
        if giveaway.ended:
            return CancelResult.ALREADY_ENDED

        ensure_transition(giveaway_id, giveaway.state(False), GiveawayState.CANCELED)
        if not await GiveawayRepository.cancel(giveaway_id, reason, self.clock()):
            # Drawn by the scheduler in the meantime
            return CancelResult.ALREADY_ENDED
        logger.info(f"Giveaway #{giveaway_id} canceled: {reason}")

        # The stored state is authoritative; the group messages are best-effort
        canceled = await self.get(giveaway_id)
        count = await ParticipantRepository.count(giveaway_id)
        if canceled.message_id is not None:
            if not await self.gateway.edit_public(
                canceled.chat_id, canceled.message_id, messages.canceled_post(canceled, count)
            ):
                logger.warning(f"Giveaway #{giveaway_id}: could not edit post after cancel")
        if await self.gateway.send_public(canceled.chat_id, messages.canceled_notice(canceled)) is None:
            logger.warning(f"Giveaway #{giveaway_id}: cancel notice not delivered")
        return CancelResult.CANCELED

    async def draw(self, giveaway_id: int) -> DrawOutcome:
        """Select and persist winners for a due giveaway, at most once."""
        now = self.clock()
        giveaway = await self.get(giveaway_id)
        if giveaway.ended:
            return DrawOutcome.ALREADY_ENDED
        if not giveaway.is_due(now):
            return DrawOutcome.NOT_DUE

        if not giveaway.seed:
            raise InconsistentStateError(f"Giveaway #{giveaway_id} has no committed seed")

        def choose(entrants: List[Participant]) -> List[Participant]:
            picked = self.selector.select(giveaway.seed, giveaway.id, entrants, giveaway.winners)
            target = GiveawayState.ENDED_DRAWN if picked else GiveawayState.ENDED_EMPTY
            ensure_transition(giveaway_id, GiveawayState.OPEN, target)
            return picked

        drawn = await GiveawayRepository.record_draw(giveaway_id, choose, now)
        if drawn is None:
            logger.info(f"Giveaway #{giveaway_id}: draw skipped, already ended")
            return DrawOutcome.ALREADY_ENDED

        entrants, picked = drawn
        logger.info(f"Giveaway #{giveaway_id} drawn: {len(picked)} winner(s) from {len(entrants)}")
        return DrawOutcome.DRAWN if picked else DrawOutcome.EMPTY

    async def mark_announced(self, giveaway_id: int) -> bool:
        return await GiveawayRepository.mark_announced(giveaway_id, self.clock())
