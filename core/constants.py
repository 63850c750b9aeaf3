"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


class TelegramLimits:
    """Telegram API limits."""
    CALLBACK_ALERT_MAX_LENGTH = 200


class DatabaseDefaults:
    """Default database configuration."""
    PATH = "data/giveaway.sqlite"
    POOL_SIZE = 5
    BUSY_TIMEOUT = 5000  # milliseconds


class SchedulerDefaults:
    """Draw/announce loop configuration."""
    TICK_SECONDS = 30
    MIN_TICK_SECONDS = 5
    PUBLISH_TIMEOUT = 15.0  # seconds


class GiveawayDefaults:
    """Giveaway creation limits."""
    SEED_RANDOM_BYTES = 32
    MIN_WINNERS = 1
    MAX_WINNERS = 1000
    MIN_TEXT_LENGTH = 2
    HISTORY_LIMIT = 10
    TIME_FORMAT = "%H:%M %d/%m/%Y"
    TIME_FORMAT_HINT = "HH:mm DD/MM/YYYY"
    TIMEZONE = "Asia/Ho_Chi_Minh"
    WINNER_PRESETS = (1, 2, 3, 5, 10)


class RateLimitDefaults:
    """Rate limiting configuration."""
    MAX_CALLBACKS = 3  # per window
    WINDOW_SECONDS = 2.0


class SettingKeys:
    """Keys of the operator settings table."""
    DEFAULT_GROUP_ID = "default_group_id"


class GiveawayState(str, Enum):
    """Lifecycle states of a giveaway."""
    OPEN = "open"
    ENDED_DRAWN = "ended_drawn"
    ENDED_EMPTY = "ended_empty"
    CANCELED = "canceled"
    ANNOUNCED = "announced"


# Compared with ==, so aiogram's ChatMemberStatus values match too
MEMBER_STATUSES = ("member", "administrator", "creator")
