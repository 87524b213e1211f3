"""
Client for the Ticketmaster resale availability API.
"""
import logging
from typing import List

import httpx
from pydantic import ValidationError

from .errors import RequestError
from .models import AppConfig, AvailabilityResponse, Offer

logger = logging.getLogger(__name__)


class AvailabilityClient:
    """Fetches the current resale offers for an event."""

    def __init__(
        self,
        url_template: str,
        timeout: float = 30.0,
    ):
        self.url_template = url_template
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: AppConfig) -> "AvailabilityClient":
        return cls(config.availability_url_template, timeout=config.request_timeout)

    def url_for(self, event_id: str) -> str:
        return self.url_template.format(event_id=event_id)

    async def fetch(self, event_id: str, cookie: str) -> List[Offer]:
        """Fetch the resale offers for an event.

        Args:
            event_id: Ticketmaster event id
            cookie: Session cookie string sent as the ``Cookie`` header

        Returns:
            The offers listed for the event, possibly empty.

        Raises:
            RequestError: on transport failure, a non-success status or a
                body that is not a valid availability response.
        """
        url = self.url_for(event_id)
        headers = {
            "Cookie": cookie,
            "Accept": "application/json",
        }
        logger.info(f"🌐 Fetching resale availability from {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise RequestError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            raise RequestError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = AvailabilityResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise RequestError(
                f"Could not parse availability response: {e}",
                status_code=response.status_code,
            ) from e

        logger.debug(f"Availability response contained {len(body.offers)} offer(s)")
        return body.offers
