"""Deterministic, verifiable winner selection."""

from __future__ import annotations

import hashlib
import hmac
from typing import Iterable, List, Sequence, TypeVar

from core import get_logger
from core.exceptions import ValidationError
from database.models import Participant

logger = get_logger(__name__)

P = TypeVar("P", bound=Participant)

VERIFY_FORMULA = 'rank = HMAC_SHA256(seed, "<id>:<user_id>"), sort asc, take top N'


class FairSelector:
    """Provably fair selection keyed by the giveaway's secret seed.

    Every participant gets ``rank = HMAC-SHA256(seed, "<giveaway_id>:<user_id>")``.
    Participants are ordered by the hex rank ascending (ties by user id) and
    the first ``k`` win. The result depends only on the inputs, so anyone
    holding the revealed seed can recompute it.
    """

    @staticmethod
    def rank(seed: str, giveaway_id: int, user_id: int) -> str:
        message = f"{giveaway_id}:{user_id}".encode("utf-8")
        return hmac.new(seed.encode("utf-8"), message, hashlib.sha256).hexdigest()

    def select(
        self,
        seed: str,
        giveaway_id: int,
        participants: Iterable[P],
        k: int,
    ) -> List[P]:
        """Select up to ``k`` winners.

        Args:
            seed: Secret seed committed at creation
            giveaway_id: Giveaway identifier mixed into every rank
            participants: All valid entrants, in any order
            k: Requested number of winners

        Returns:
            Winners in published order; fewer than ``k`` if there are not
            enough participants

        Raises:
            ValidationError: If k is less than 1
        """
        if k < 1:
            raise ValidationError("BAD_WINNERS", "Number of winners must be at least 1")

        ranked = sorted(
            participants,
            key=lambda p: (self.rank(seed, giveaway_id, p.user_id), p.user_id),
        )
        winners = ranked[: min(k, len(ranked))]
        logger.info(
            f"Giveaway #{giveaway_id}: selected {len(winners)} of {len(ranked)} participants (requested {k})"
        )
        return winners

    def verify(
        self,
        seed: str,
        giveaway_id: int,
        participants: Iterable[Participant],
        k: int,
        published: Sequence[int],
    ) -> bool:
        """Check a published winner id list against a recomputation."""
        expected = [p.user_id for p in self.select(seed, giveaway_id, participants, k)]
        return expected == list(published)
