"""Ticketmaster Resale Check package.

This package checks Ticketmaster resale availability for one event and
sends an ntfy notification when offers appear that were not reported before.
"""

__version__ = "0.1.0"

# Import key components to make them available at the package level
from .app import CheckResult, CheckState, TicketCheck, find_new_offers, run_once
from .availability import AvailabilityClient
from .errors import (
    ConfigurationError,
    NotificationError,
    PersistenceError,
    RequestError,
    TicketCheckError,
)
from .models import AppConfig, EventInfo, Notification, NotificationConfig, Offer
from .notifications import Notifier, NtfyNotificationService
from .state import StateStore

__all__ = [
    'AppConfig',
    'AvailabilityClient',
    'CheckResult',
    'CheckState',
    'ConfigurationError',
    'EventInfo',
    'Notification',
    'NotificationConfig',
    'NotificationError',
    'Notifier',
    'NtfyNotificationService',
    'Offer',
    'PersistenceError',
    'RequestError',
    'StateStore',
    'TicketCheck',
    'TicketCheckError',
    'find_new_offers',
    'run_once',
]
