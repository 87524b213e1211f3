"""Exceptions raised by the Ticketmaster Resale Check."""
from typing import Optional


class TicketCheckError(Exception):
    """Base class for all check errors."""


class ConfigurationError(TicketCheckError):
    """Required settings are missing or invalid."""


class RequestError(TicketCheckError):
    """The availability endpoint failed or returned an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(TicketCheckError):
    """The notified offers file could not be read or written."""


class NotificationError(TicketCheckError):
    """A push notification could not be delivered to ntfy."""
