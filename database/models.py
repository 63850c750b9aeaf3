"""Data access layer models implemented with handcrafted queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from core.constants import GiveawayState

GIVEAWAY_COLUMNS: tuple[str, ...] = (
    "id",
    "chat_id",
    "message_id",
    "prize",
    "sponsor",
    "winners",
    "end_time",
    "ended",
    "created_at",
    "ended_at",
    "seed",
    "seed_hash",
    "canceled",
    "cancel_reason",
    "announced",
    "announced_at",
)


@dataclass(slots=True)
class Giveaway:
    id: int
    chat_id: int
    message_id: Optional[int]
    prize: str
    sponsor: str
    winners: int
    end_time: int
    ended: bool
    created_at: int
    ended_at: Optional[int]
    seed: Optional[str]
    seed_hash: Optional[str]
    canceled: bool
    cancel_reason: Optional[str]
    announced: bool
    announced_at: Optional[int]

    @classmethod
    def from_row(cls, row: Sequence) -> "Giveaway":
        data = dict(zip(GIVEAWAY_COLUMNS, row))
        for flag in ("ended", "canceled", "announced"):
            data[flag] = bool(data[flag])
        return cls(**data)

    def is_due(self, now: int) -> bool:
        return now >= self.end_time

    def state(self, has_winners: bool) -> GiveawayState:
        """Map the stored flags onto a lifecycle state.

        ``has_winners`` distinguishes a drawn giveaway from one that
        closed without entrants; it is ignored for other states.
        """
        if self.canceled:
            return GiveawayState.CANCELED
        if self.announced:
            return GiveawayState.ANNOUNCED
        if self.ended:
            return GiveawayState.ENDED_DRAWN if has_winners else GiveawayState.ENDED_EMPTY
        return GiveawayState.OPEN


@dataclass(slots=True, frozen=True)
class Participant:
    user_id: int
    name: str
    joined_at: int = 0


@dataclass(slots=True, frozen=True)
class Winner:
    user_id: int
    name: str
    position: int
