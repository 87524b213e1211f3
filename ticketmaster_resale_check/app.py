"""
Main application module for Ticketmaster Resale Check.
"""
import enum
import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from .availability import AvailabilityClient
from .errors import PersistenceError
from .models import AppConfig, NotificationConfig, Offer
from .notifications import Notifier, create_notifier
from .state import StateStore

logger = logging.getLogger(__name__)


class CheckState(enum.Enum):
    """Steps a single check passes through."""
    FETCHING = "fetching"
    EVALUATING = "evaluating"
    NOTIFYING_SUCCESS = "notifying_success"
    IDLE = "idle"
    ERROR = "error"
    NOTIFYING_ERROR = "notifying_error"
    DONE = "done"


@dataclass
class CheckResult:
    """Outcome of one pass."""
    notified: FrozenSet[str]
    new_offers: List[Offer] = field(default_factory=list)
    notification_sent: bool = False
    error: Optional[BaseException] = None
    states: List[CheckState] = field(default_factory=list)
    changed: bool = False


def find_new_offers(offers: Iterable[Offer], notified: FrozenSet[str]) -> List[Offer]:
    """Return the offers whose id has not been notified yet.

    Order is kept; an id listed twice in the same response is only returned once.
    """
    seen = set(notified)
    new_offers = []
    for offer in offers:
        if offer.id in seen:
            continue
        seen.add(offer.id)
        new_offers.append(offer)
    return new_offers


class TicketCheck:
    """Runs one fetch → evaluate → notify pass for the configured event."""

    def __init__(
        self,
        config: AppConfig,
        client: Optional[AvailabilityClient] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.config = config
        self.event = config.event
        self.client = client or AvailabilityClient.from_config(config)
        self.notifier = notifier or create_notifier(config.notification)
        self.states: List[CheckState] = []

    def _enter(self, state: CheckState) -> None:
        logger.debug(f"State -> {state.value}")
        self.states.append(state)

    async def run(self, notified: FrozenSet[str]) -> CheckResult:
        """Run the check against the already-notified ids.

        Returns a result whose ``notified`` set includes the ids of any offers
        that were successfully announced during this pass.
        """
        self.states = []
        result = CheckResult(notified=frozenset(notified), states=self.states)

        logger.info(f"🔍 Checking resale offers for {self.event.name} ({self.event.event_id})")
        self._enter(CheckState.FETCHING)
        try:
            offers = await self.client.fetch(self.event.event_id, self.config.cookie)
        except Exception as e:
            logger.error(f"❌ Error fetching offers: {e}", exc_info=True)
            result.error = e
            self._enter(CheckState.ERROR)
            self._enter(CheckState.NOTIFYING_ERROR)
            await self.notifier.notify_error(e, self.event)
            self._enter(CheckState.DONE)
            return result

        self._enter(CheckState.EVALUATING)
        if not offers:
            logger.info("NO TICKETS AVAILABLE")

        new_offers = find_new_offers(offers, result.notified)
        result.new_offers = new_offers
        if not new_offers:
            if offers:
                logger.info(f"No new offers ({len(offers)} already notified)")
            self._enter(CheckState.IDLE)
            self._enter(CheckState.DONE)
            return result

        logger.warning(f"🎉 TICKETS AVAILABLE?! {len(new_offers)} new offer(s)")
        self._enter(CheckState.NOTIFYING_SUCCESS)
        sent = await self.notifier.notify_success(new_offers, self.event)
        result.notification_sent = sent
        if sent:
            result.notified = result.notified | {offer.id for offer in new_offers}
            result.changed = True
        else:
            logger.warning("Notification failed, offers will be retried on the next run")

        self._enter(CheckState.DONE)
        return result


async def run_once(
    config: AppConfig,
    store: Optional[StateStore] = None,
    client: Optional[AvailabilityClient] = None,
    notifier: Optional[Notifier] = None,
) -> CheckResult:
    """Load state, run one check and persist the notified ids if they grew."""
    store = store or StateStore(config.state_file)
    notified = store.load()
    logger.debug(f"Loaded {len(notified)} notified offer id(s)")

    check = TicketCheck(config, client=client, notifier=notifier)
    result = await check.run(notified)

    if result.changed:
        try:
            store.save(result.notified)
        except PersistenceError as e:
            logger.error(f"Error saving notified offer IDs: {e}")
    return result


def create_default_config() -> AppConfig:
    """Create a default configuration."""
    return AppConfig(
        log_level="INFO",
        notification=NotificationConfig(),
    )


def load_config() -> AppConfig:
    """Load configuration from environment variables."""
    from dotenv import load_dotenv

    # Load environment variables from .env file
    load_dotenv()

    config = create_default_config()

    if os.getenv("TM_EVENT_ID"):
        config.event_id = os.getenv("TM_EVENT_ID").strip()

    if os.getenv("TM_EVENT_NAME"):
        config.event_name = os.getenv("TM_EVENT_NAME").strip()

    if os.getenv("NTFY_URL"):
        config.ntfy_url = os.getenv("NTFY_URL").strip()

    if os.getenv("TM_COOKIE"):
        config.cookie = os.getenv("TM_COOKIE").strip()

    if os.getenv("TM_COOKIE_FILE"):
        config.cookie_file = os.getenv("TM_COOKIE_FILE")

    if os.getenv("STATE_FILE"):
        config.state_file = os.getenv("STATE_FILE")

    if os.getenv("TM_EVENT_URL_TEMPLATE"):
        config.event_url_template = os.getenv("TM_EVENT_URL_TEMPLATE")

    if os.getenv("TM_AVAILABILITY_URL_TEMPLATE"):
        config.availability_url_template = os.getenv("TM_AVAILABILITY_URL_TEMPLATE")

    if os.getenv("NTFY_ACTION_LABEL"):
        config.notification.action_label = os.getenv("NTFY_ACTION_LABEL")

    if os.getenv("REQUEST_TIMEOUT"):
        try:
            config.request_timeout = float(os.getenv("REQUEST_TIMEOUT"))
        except (ValueError, TypeError):
            logger.warning("Invalid REQUEST_TIMEOUT. Using default.")

    if os.getenv("LOG_LEVEL"):
        log_level = os.getenv("LOG_LEVEL").upper()
        if log_level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            config.log_level = log_level

    return config
