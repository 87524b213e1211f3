"""Command-line interface for Ticketmaster Resale Check."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from ticketmaster_resale_check import __version__
from ticketmaster_resale_check.app import load_config, run_once
from ticketmaster_resale_check.errors import ConfigurationError
from ticketmaster_resale_check.models import AppConfig

logger = logging.getLogger(__name__)

# Options the original script took as bare key=value tokens
LEGACY_KEYS = ('eventId', 'eventName', 'ntfyUrl')

# Options whose value is the following token
VALUE_OPTIONS = {
    '--event-id', '--eventId', '--event-name', '--eventName', '--cookie', '--cookie-file',
    '--ntfy-url', '--ntfyUrl', '--action-label', '--state-file', '--timeout', '--log-level',
}


def normalize_legacy_args(args: List[str]) -> List[str]:
    """Turn bare ``eventId=...`` style tokens into ``--eventId=...``."""
    normalized = []
    previous = None
    for token in args:
        key, sep, _ = token.partition('=')
        if sep and key in LEGACY_KEYS and previous not in VALUE_OPTIONS:
            token = f'--{token}'
        normalized.append(token)
        previous = token
    return normalized


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: List of command line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Check Ticketmaster resale availability once and notify about new offers.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Event configuration
    event_group = parser.add_argument_group('Event Configuration')
    event_group.add_argument(
        '--event-id', '--eventId',
        dest='event_id',
        type=str,
        help='Ticketmaster event id (env: TM_EVENT_ID)',
    )
    event_group.add_argument(
        '--event-name', '--eventName',
        dest='event_name',
        type=str,
        help='Event name used in notifications (env: TM_EVENT_NAME)',
    )

    # Session configuration
    session_group = parser.add_argument_group('Session')
    cookie_source = session_group.add_mutually_exclusive_group()
    cookie_source.add_argument(
        '--cookie',
        type=str,
        help='Session cookie string sent to the availability API (env: TM_COOKIE)',
    )
    cookie_source.add_argument(
        '--cookie-file',
        type=str,
        help='File containing the session cookie string (env: TM_COOKIE_FILE)',
    )

    # Notification configuration
    notification_group = parser.add_argument_group('Notification Configuration')
    notification_group.add_argument(
        '--ntfy-url', '--ntfyUrl',
        dest='ntfy_url',
        type=str,
        help='ntfy topic URL, e.g. https://ntfy.sh/my-topic (env: NTFY_URL)',
    )
    notification_group.add_argument(
        '--action-label',
        type=str,
        help='Label of the button linking to the event page (env: NTFY_ACTION_LABEL)',
    )

    # State and network
    misc_group = parser.add_argument_group('State and Network')
    misc_group.add_argument(
        '--state-file',
        type=str,
        help='JSON file holding the already notified offer ids (env: STATE_FILE)',
    )
    misc_group.add_argument(
        '--timeout',
        type=float,
        help='HTTP request timeout in seconds (env: REQUEST_TIMEOUT)',
    )

    # Logging configuration
    log_group = parser.add_argument_group('Logging')
    log_group.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (env: LOG_LEVEL)',
    )
    log_group.add_argument(
        '--verbose', '-v',
        action='store_const',
        const='DEBUG',
        dest='log_level',
        help='Enable verbose output (same as --log-level DEBUG)',
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
        help='show version and exit',
    )

    if args is None:
        args = sys.argv[1:]
    return parser.parse_args(normalize_legacy_args(list(args)))


def create_config_from_args(args: argparse.Namespace, config: Optional[AppConfig] = None) -> AppConfig:
    """Overlay explicitly given command line arguments on a configuration.

    Args:
        args: Parsed command line arguments.
        config: Configuration to update, usually loaded from the environment.

    Returns:
        AppConfig: The updated configuration.
    """
    if config is None:
        config = AppConfig()

    if args.event_id:
        config.event_id = args.event_id.strip()

    if args.event_name:
        config.event_name = args.event_name.strip()

    if args.ntfy_url:
        config.ntfy_url = args.ntfy_url.strip()

    # A cookie given on the command line wins over any cookie source from the environment
    if args.cookie:
        config.cookie = args.cookie.strip()
        config.cookie_file = None
    elif args.cookie_file:
        config.cookie_file = args.cookie_file
        config.cookie = None

    if args.action_label:
        config.notification.action_label = args.action_label

    if args.state_file:
        config.state_file = args.state_file

    if args.timeout is not None:
        config.request_timeout = args.timeout

    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def parse_ntfy_url(url: str) -> Tuple[str, str]:
    """Split an ntfy topic URL into ``(server origin, topic)``."""
    parts = urlsplit(url)
    if parts.scheme not in ('http', 'https') or not parts.netloc:
        raise ConfigurationError(f"Invalid ntfyUrl {url!r}. Please provide a full http(s) URL.")

    segments = [segment for segment in parts.path.split('/') if segment]
    if not segments:
        raise ConfigurationError("Invalid ntfyUrl. Please provide a valid URL with a topic.")

    return f"{parts.scheme}://{parts.netloc}", segments[0]


def read_cookie_file(path: str) -> str:
    """Read a session cookie from a file, rejecting missing or empty files."""
    cookie_path = Path(path)
    try:
        cookie = cookie_path.read_text(encoding='utf-8').strip()
    except OSError as e:
        raise ConfigurationError(f"Could not read cookie file {path}: {e}") from e

    if not cookie:
        raise ConfigurationError(f"Cookie file {path} is empty")
    return cookie


def finalize_config(config: AppConfig) -> AppConfig:
    """Validate required settings and resolve derived values.

    Raises:
        ConfigurationError: if a required setting is missing or invalid.
    """
    missing = [
        name for name, value in (
            ('eventId', config.event_id),
            ('eventName', config.event_name),
            ('ntfyUrl', config.ntfy_url),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing required parameters: {', '.join(missing)}")

    config.notification.server, config.notification.topic = parse_ntfy_url(config.ntfy_url)
    config.notification.timeout = config.request_timeout

    if config.cookie_file:
        config.cookie = read_cookie_file(config.cookie_file)
    if not config.cookie:
        raise ConfigurationError("No session cookie configured. Use --cookie or --cookie-file")

    if config.request_timeout <= 0:
        raise ConfigurationError("Request timeout must be positive")

    for name, template in (
        ('TM_EVENT_URL_TEMPLATE', config.event_url_template),
        ('TM_AVAILABILITY_URL_TEMPLATE', config.availability_url_template),
    ):
        try:
            template.format(event_id=config.event_id)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid {name} {template!r}: only {{event_id}} may be used ({e!r})"
            ) from e

    return config


def configure_logging(level: str = 'INFO') -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as a string (e.g., 'INFO', 'DEBUG').
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Keep request logging from httpx out of the way
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


async def async_main(argv: Optional[List[str]] = None) -> int:
    """Async entry point for the CLI."""
    args = parse_args(argv)

    # Environment first, command line on top
    config = create_config_from_args(args, load_config())

    configure_logging(level=config.log_level)

    try:
        config = finalize_config(config)
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        return 1

    logger.info(f"Ntfy URL: {config.notification.server}")
    logger.info(f"Ntfy Topic: {config.notification.topic}")
    logger.info(f"Fetching data for event: {config.event_name} ({config.event_id})")

    await run_once(config)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        print("\n👋 Operation cancelled by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
