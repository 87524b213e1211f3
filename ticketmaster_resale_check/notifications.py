"""
Notification handling for the Ticketmaster Resale Check.
"""
import logging
from typing import Iterable, Optional

import httpx

from .errors import NotificationError
from .models import EventInfo, Notification, NotificationConfig, Offer

logger = logging.getLogger(__name__)

ERROR_TITLE = "Error checking tickets"


def count_tickets(offers: Iterable[Offer]) -> int:
    """Total number of tickets across all offers."""
    return sum(offer.total_quantity for offer in offers)


def build_success_title(total: int) -> str:
    """Title announcing ``total`` tickets, singular only for exactly one."""
    suffix = "" if total == 1 else "TER"
    return f"DER ER {total} BILLET{suffix} TIL SALG?!"


class NotificationService:
    """Base class for notification services."""

    def __init__(self, config: NotificationConfig):
        self.config = config

    async def send(self, notification: Notification) -> bool:
        """Send a notification once.

        Raises:
            NotificationError: if the notification could not be delivered.
        """
        try:
            return await self._send_impl(notification)
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"{self.__class__.__name__} failed: {e}") from e

    async def _send_impl(self, notification: Notification) -> bool:
        """Implementation of the notification sending logic."""
        raise NotImplementedError("Subclasses must implement this method")


class NtfyNotificationService(NotificationService):
    """Publishes JSON messages to an ntfy server."""

    def __init__(self, config: NotificationConfig):
        super().__init__(config)
        if not config.server:
            raise ValueError("ntfy server is not configured")
        self.base_url = config.server

    async def _send_impl(self, notification: Notification) -> bool:
        """POST the notification as JSON to the server root."""
        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            try:
                response = await client.post(self.base_url, json=notification.to_payload())
            except httpx.HTTPError as e:
                raise NotificationError(f"Could not reach {self.base_url}: {e}") from e

        if not response.is_success:
            raise NotificationError(
                f"ntfy responded with status {response.status_code}"
            )
        return True


class Notifier:
    """Composes success and error messages and sends them."""

    def __init__(self, config: NotificationConfig, service: Optional[NotificationService] = None):
        self.config = config
        self.service = service or NtfyNotificationService(config)

    async def notify_success(self, offers: Iterable[Offer], event: EventInfo) -> bool:
        """Announce new offers for ``event``.

        Returns:
            True if the message was delivered. Only then should the offer ids
            be recorded as notified.
        """
        offers = list(offers)
        total = count_tickets(offers)
        notification = Notification(
            topic=self.config.topic,
            title=build_success_title(total),
            message=event.name,
            actions=[
                {
                    "action": "view",
                    "label": self.config.action_label,
                    "url": event.url,
                }
            ],
        )

        logger.info(f"📣 Sending notification for {len(offers)} new offer(s), {total} ticket(s)")
        try:
            await self.service.send(notification)
        except NotificationError as e:
            logger.error(f"Error sending notification: {e}")
            return False
        logger.info("✅ Notification sent")
        return True

    async def notify_error(self, error: BaseException, event: EventInfo) -> bool:
        """Report a failed check. Failures here are logged and swallowed."""
        notification = Notification(
            topic=self.config.topic,
            title=ERROR_TITLE,
            message=(
                f'An error occurred while checking tickets for "{event.name}".'
                f"\n\n{error}"
            ),
        )

        logger.info("Sending error notification...")
        try:
            await self.service.send(notification)
        except NotificationError as e:
            logger.error(f"Error sending error notification: {e}")
            return False
        return True


def create_notifier(config: NotificationConfig) -> Notifier:
    """Create a notifier publishing to the configured ntfy server."""
    return Notifier(config)
