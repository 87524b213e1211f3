"""Data models and types for the Ticketmaster Resale Check."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EVENT_URL_TEMPLATE = "https://www.ticketmaster.dk/event/{event_id}"
DEFAULT_AVAILABILITY_URL_TEMPLATE = (
    "https://availability.ticketmaster.dk/api/v2/TM_DK/resale/{event_id}"
)
DEFAULT_STATE_FILE = "notifiedOffers.json"
DEFAULT_ACTION_LABEL = "Køb billetter!"


class Offer(BaseModel):
    """A resale listing as returned by the availability API."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    quantities: List[int] = Field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(self.quantities)


class AvailabilityResponse(BaseModel):
    """Body of the resale availability endpoint."""

    model_config = ConfigDict(extra="ignore")

    offers: List[Offer]


@dataclass
class EventInfo:
    """The event being watched."""
    event_id: str
    name: str
    url: str


@dataclass
class Notification:
    """Represents a notification to be sent."""
    topic: str
    title: str
    message: str
    actions: Optional[List[Dict[str, Any]]] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "topic": self.topic,
            "title": self.title,
            "message": self.message,
        }
        if self.actions:
            payload["actions"] = self.actions
        return payload


@dataclass
class NotificationConfig:
    """Configuration for ntfy notifications."""
    server: Optional[str] = None  # origin, e.g. https://ntfy.sh
    topic: Optional[str] = None
    action_label: str = DEFAULT_ACTION_LABEL
    timeout: float = 30.0  # seconds


@dataclass
class AppConfig:
    """Main application configuration."""
    event_id: Optional[str] = None
    event_name: Optional[str] = None
    cookie: Optional[str] = None
    cookie_file: Optional[str] = None
    ntfy_url: Optional[str] = None
    state_file: str = DEFAULT_STATE_FILE
    event_url_template: str = DEFAULT_EVENT_URL_TEMPLATE
    availability_url_template: str = DEFAULT_AVAILABILITY_URL_TEMPLATE
    request_timeout: float = 30.0  # seconds
    log_level: str = "INFO"
    notification: NotificationConfig = field(default_factory=NotificationConfig)

    @property
    def event(self) -> EventInfo:
        return EventInfo(
            event_id=self.event_id or "",
            name=self.event_name or "",
            url=self.event_url_template.format(event_id=self.event_id),
        )
