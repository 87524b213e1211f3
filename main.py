"""Ticketmaster Resale Check

Checks Ticketmaster resale availability once and sends a notification for new offers.
"""
import logging
import sys


def main() -> int:
    """Main entry point that runs the CLI with proper asyncio setup."""
    try:
        # Import here to avoid circular imports
        from ticketmaster_resale_check.cli import main as cli_main

        return cli_main()

    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
