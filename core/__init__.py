"""Core application components."""

# Import in correct order to avoid circular dependencies
from core.logger import setup_logger, get_logger
from core.constants import (
    TelegramLimits,
    DatabaseDefaults,
    SchedulerDefaults,
    GiveawayDefaults,
    RateLimitDefaults,
    SettingKeys,
    GiveawayState,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    DatabaseError,
    RepositoryError,
    ValidationError,
    GiveawayError,
    GiveawayNotFoundError,
    InvalidTransitionError,
    InconsistentStateError,
    DeliveryError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'TelegramLimits',
    'DatabaseDefaults',
    'SchedulerDefaults',
    'GiveawayDefaults',
    'RateLimitDefaults',
    'SettingKeys',
    'GiveawayState',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'DatabaseError',
    'RepositoryError',
    'ValidationError',
    'GiveawayError',
    'GiveawayNotFoundError',
    'InvalidTransitionError',
    'InconsistentStateError',
    'DeliveryError',
]
