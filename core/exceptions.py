"""Application-wide exception classes."""

from __future__ import annotations


class ApplicationError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class DatabaseError(ApplicationError):
    """Base exception for database-related errors."""
    pass


class RepositoryError(DatabaseError):
    """Raised when repository operation fails."""
    pass


class ValidationError(ApplicationError):
    """Raised when operator input is rejected before entering the lifecycle."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code


class GiveawayError(ApplicationError):
    """Base exception for giveaway lifecycle errors."""
    pass


class GiveawayNotFoundError(GiveawayError):
    """Raised when a giveaway id does not exist."""
    pass


class InvalidTransitionError(GiveawayError):
    """Raised when a lifecycle transition is not allowed from the current state."""
    pass


class InconsistentStateError(GiveawayError):
    """Raised when stored giveaway data contradicts its flags."""
    pass


class DeliveryError(ApplicationError):
    """Raised when a required outbound message could not be delivered."""
    pass
