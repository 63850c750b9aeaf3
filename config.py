"""Application configuration module.

Reads settings from environment variables (and an optional ``.env`` file)
with defaults suited to a single-group giveaway bot.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from core.constants import DatabaseDefaults, GiveawayDefaults, SchedulerDefaults
from core.exceptions import ConfigurationError


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


def _parse_int_list(value: str) -> tuple[int, ...]:
    """Parse comma-separated integers."""
    if not value:
        return ()
    try:
        return tuple(int(id_str.strip()) for id_str in value.split(",") if id_str.strip())
    except ValueError as exc:
        raise ConfigurationError(f"ADMIN_IDS must be comma-separated integers: {value!r}") from exc


@dataclass(frozen=True)
class Config:
    bot_token: str
    admin_ids: tuple[int, ...]
    timezone: str
    start_link: str
    debug: bool
    log_level: str
    log_folder: str
    database_path: str
    db_pool_size: int
    db_busy_timeout: int
    bot_rate_limit: int
    tick_seconds: int
    publish_timeout: float

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_ids


def load_config() -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration with validated values

    Raises:
        ConfigurationError: If the timezone is unknown
    """
    load_dotenv()

    timezone = _get_str("TIMEZONE", GiveawayDefaults.TIMEZONE)
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown TIMEZONE: {timezone}") from exc

    return Config(
        bot_token=_get_str("BOT_TOKEN"),
        admin_ids=_parse_int_list(_get_str("ADMIN_IDS", "")),
        timezone=timezone,
        start_link=_get_str("START_LINK", ""),
        debug=_get_bool("DEBUG", False),
        log_level=_get_str("LOG_LEVEL", "INFO").upper(),
        log_folder=_get_str("LOG_FOLDER", "logs"),
        database_path=_get_str("DATABASE_PATH", DatabaseDefaults.PATH),
        db_pool_size=_get_int("DB_POOL_SIZE", DatabaseDefaults.POOL_SIZE),
        db_busy_timeout=_get_int("DB_BUSY_TIMEOUT", DatabaseDefaults.BUSY_TIMEOUT),
        bot_rate_limit=_get_int("BOT_RATE_LIMIT", 20),
        # A floor keeps a misconfigured interval from tight-looping the scheduler
        tick_seconds=max(
            SchedulerDefaults.MIN_TICK_SECONDS,
            _get_int("TICK_SECONDS", SchedulerDefaults.TICK_SECONDS),
        ),
        publish_timeout=_get_float("PUBLISH_TIMEOUT", SchedulerDefaults.PUBLISH_TIMEOUT),
    )
