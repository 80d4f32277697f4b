"""
Dispatch Daemon

Background service that sweeps for due reminders and emails them, for
deployments that run the web app with DISPATCHER_ENABLED=false.
"""

import time
import logging
import signal

from config.database import configure_database, init_database
from config.logging_config import setup_logging
from config.settings import load_settings
from webapp.services.credential_vault import CredentialVault
from webapp.services.dispatcher import ReminderDispatcher

logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    global running
    logger.info("Received shutdown signal. Stopping gracefully...")
    running = False


def main():
    """
    Main daemon loop.
    Runs one sweep per interval until interrupted.
    """
    global running

    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)

    # Register signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    configure_database(settings.database_url)
    init_database()
    dispatcher = ReminderDispatcher.from_settings(
        settings, CredentialVault(settings.aes_secret_key)
    )

    logger.info("Starting Dispatch Daemon")
    logger.info("Press Ctrl+C to stop")

    cycle_count = 0

    try:
        while running:
            cycle_count += 1
            logger.debug(f"=== Dispatch Cycle #{cycle_count} ===")

            try:
                summary = dispatcher.sweep()
                if summary['due']:
                    logger.info(
                        f"Cycle #{cycle_count}: {summary['sent']} sent, "
                        f"{summary['skipped']} skipped, {summary['failed']} failed"
                    )
            except Exception as e:
                logger.error(f"Error in dispatch cycle: {e}", exc_info=True)

            # Check every second if we should stop (allows responsive shutdown)
            for _ in range(settings.dispatch_interval_seconds):
                if not running:
                    break
                time.sleep(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        logger.info("Dispatch Daemon stopped")


if __name__ == "__main__":
    main()
