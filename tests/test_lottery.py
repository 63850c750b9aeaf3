"""Unit tests for the deterministic winner selector."""

import hashlib
import hmac
import random

import pytest

from core.exceptions import ValidationError
from database.models import Participant
from services.lottery import FairSelector

SEED = "5f" * 32
GIVEAWAY_ID = 42


@pytest.fixture
def selector():
    return FairSelector()


@pytest.fixture
def participants():
    return [Participant(user_id=1000 + i, name=f"User {i}") for i in range(20)]


def test_rank_matches_hmac_formula(selector):
    expected = hmac.new(SEED.encode(), b"42:1007", hashlib.sha256).hexdigest()
    assert selector.rank(SEED, GIVEAWAY_ID, 1007) == expected


def test_selection_independent_of_input_order(selector, participants):
    baseline = selector.select(SEED, GIVEAWAY_ID, participants, 5)
    shuffled = participants[:]
    random.Random(3).shuffle(shuffled)

    assert selector.select(SEED, GIVEAWAY_ID, shuffled, 5) == baseline
    assert selector.select(SEED, GIVEAWAY_ID, reversed(participants), 5) == baseline


def test_winners_are_lowest_ranks_in_order(selector, participants):
    winners = selector.select(SEED, GIVEAWAY_ID, participants, 3)
    ranks = sorted(selector.rank(SEED, GIVEAWAY_ID, p.user_id) for p in participants)
    assert [selector.rank(SEED, GIVEAWAY_ID, w.user_id) for w in winners] == ranks[:3]


def test_fewer_participants_than_winners(selector, participants):
    winners = selector.select(SEED, GIVEAWAY_ID, participants[:2], 10)
    assert len(winners) == 2
    assert {w.user_id for w in winners} == {1000, 1001}


def test_no_participants(selector):
    assert selector.select(SEED, GIVEAWAY_ID, [], 3) == []


def test_winners_are_distinct(selector, participants):
    winners = selector.select(SEED, GIVEAWAY_ID, participants, 20)
    assert len({w.user_id for w in winners}) == 20


def test_seed_and_giveaway_id_change_the_order(selector, participants):
    baseline = [p.user_id for p in selector.select(SEED, GIVEAWAY_ID, participants, 20)]
    other_seed = [p.user_id for p in selector.select("00" * 32, GIVEAWAY_ID, participants, 20)]
    other_id = [p.user_id for p in selector.select(SEED, GIVEAWAY_ID + 1, participants, 20)]
    assert baseline != other_seed
    assert baseline != other_id


def test_rejects_non_positive_k(selector, participants):
    with pytest.raises(ValidationError) as exc_info:
        selector.select(SEED, GIVEAWAY_ID, participants, 0)
    assert exc_info.value.code == "BAD_WINNERS"


def test_verify_published_list(selector, participants):
    published = [p.user_id for p in selector.select(SEED, GIVEAWAY_ID, participants, 3)]
    assert selector.verify(SEED, GIVEAWAY_ID, participants, 3, published)
    assert not selector.verify(SEED, GIVEAWAY_ID, participants, 3, list(reversed(published)))
    assert not selector.verify("00" * 32, GIVEAWAY_ID, participants, 3, published)
