"""Unit tests for commit-reveal seed handling."""

import hashlib
import re

from conftest import make_record
from services.commitment import can_reveal, create_commitment, revealed_seed, verify_commitment


def test_commitment_is_sha256_of_seed():
    commitment = create_commitment()
    assert re.fullmatch(r"[0-9a-f]{64}", commitment.seed)
    assert commitment.seed_hash == hashlib.sha256(commitment.seed.encode()).hexdigest()


def test_seeds_are_unique():
    seeds = {create_commitment().seed for _ in range(50)}
    assert len(seeds) == 50


def test_verify_commitment_binds_seed():
    commitment = create_commitment()
    assert verify_commitment(commitment.seed, commitment.seed_hash)
    assert not verify_commitment(commitment.seed + "0", commitment.seed_hash)
    assert not verify_commitment(create_commitment().seed, commitment.seed_hash)


def test_seed_hidden_while_open():
    record = make_record()
    assert not can_reveal(record)
    assert revealed_seed(record) is None


def test_seed_hidden_when_canceled():
    record = make_record(ended=True, canceled=True, cancel_reason="test")
    assert revealed_seed(record) is None


def test_seed_revealed_after_draw():
    record = make_record(ended=True, ended_at=2_000)
    assert revealed_seed(record) == "ab" * 32
    assert verify_commitment(revealed_seed(record), record.seed_hash)
