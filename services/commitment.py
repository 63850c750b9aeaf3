"""Commit-reveal helpers for per-giveaway draw seeds.

A seed is generated when a giveaway is opened and only its SHA-256
commitment is made public. Once the draw is done the seed can be revealed
to operators, who can recompute both the commitment and the winner ranking.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional

from core import GiveawayDefaults, get_logger
from database.models import Giveaway

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Commitment:
    seed: str
    seed_hash: str


def hash_seed(seed: str) -> str:
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def create_commitment() -> Commitment:
    """Generate a 256-bit secret seed and its public commitment."""
    seed = secrets.token_hex(GiveawayDefaults.SEED_RANDOM_BYTES)
    commitment = Commitment(seed=seed, seed_hash=hash_seed(seed))
    logger.debug(f"Generated commitment {commitment.seed_hash[:16]}...")
    return commitment


def verify_commitment(seed: str, seed_hash: str) -> bool:
    return hmac.compare_digest(hash_seed(seed), seed_hash)


def can_reveal(giveaway: Giveaway) -> bool:
    return giveaway.ended and not giveaway.canceled


def revealed_seed(giveaway: Giveaway) -> Optional[str]:
    """Seed for proof views, or None while the giveaway is open or canceled."""
    if not can_reveal(giveaway):
        return None
    return giveaway.seed
