"""Input validation helpers for operator commands and the creation form."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from core.constants import GiveawayDefaults
from core.exceptions import ValidationError


CLOSE_TIME_RE = re.compile(r"^[0-9]{2}:[0-9]{2} [0-9]{2}/[0-9]{2}/[0-9]{4}$")
NUMBER_RE = re.compile(r"^[0-9]+$")
COMMAND_PREFIX_RE = re.compile(r"^/\w+(@\w+)?\s*", re.IGNORECASE)
SEPARATOR_RE = re.compile(r"\s*\|\s*")


@dataclass(frozen=True)
class GiveawayArgs:
    winners: int
    end_time: int
    prize: str
    sponsor: str


def parse_close_time(value: str, tz: str) -> int:
    """Parse ``HH:MM DD/MM/YYYY`` in the given timezone into unix seconds."""
    value = (value or "").strip()
    if not CLOSE_TIME_RE.match(value):
        raise ValidationError("BAD_TIME", f"Expected {GiveawayDefaults.TIME_FORMAT_HINT}")
    try:
        parsed = datetime.strptime(value, GiveawayDefaults.TIME_FORMAT)
    except ValueError as e:
        raise ValidationError("BAD_TIME", str(e)) from e
    return int(parsed.replace(tzinfo=ZoneInfo(tz)).timestamp())


def parse_winner_count(value: str) -> int:
    value = (value or "").strip()
    if not NUMBER_RE.match(value):
        raise ValidationError("BAD_WINNERS")
    count = int(value)
    if not GiveawayDefaults.MIN_WINNERS <= count <= GiveawayDefaults.MAX_WINNERS:
        raise ValidationError("BAD_WINNERS")
    return count


def validate_text_field(value: str, code: str) -> str:
    value = (value or "").strip()
    if len(value) < GiveawayDefaults.MIN_TEXT_LENGTH:
        raise ValidationError(code)
    return value


def parse_giveaway_args(text: str, tz: str) -> GiveawayArgs:
    """Parse ``/giveaway <winners>|<time>|<prize>|<sponsor>``.

    The full-width bar is accepted as a separator. The prize may itself
    contain ``|``: the first two fields and the last one are fixed, the
    rest is joined back into the prize.
    """
    raw = COMMAND_PREFIX_RE.sub("", (text or "").strip(), count=1)
    raw = SEPARATOR_RE.sub("|", raw.replace("｜", "|")).strip()

    parts = raw.split("|")
    if len(parts) < 4:
        raise ValidationError("BAD_FORMAT")

    winners = parse_winner_count(parts[0])
    end_time = parse_close_time(parts[1], tz)
    prize = "|".join(parts[2:-1]).strip()
    sponsor = parts[-1].strip()
    if not prize:
        raise ValidationError("BAD_PRIZE")
    if not sponsor:
        raise ValidationError("BAD_SPONSOR")
    return GiveawayArgs(winners=winners, end_time=end_time, prize=prize, sponsor=sponsor)


def parse_giveaway_id(value: str | None) -> int:
    value = (value or "").strip().lstrip("#")
    if not NUMBER_RE.match(value) or int(value) < 1:
        raise ValidationError("BAD_FORMAT", "Giveaway id must be a positive number")
    return int(value)
