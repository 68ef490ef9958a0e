# src/schedule_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (loading persisted tasks), runs the daily
reconciliation pass, then starts the console connector.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state, reconcile
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(settings.log_level),
    )

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    created = reconcile(state)
    if created:
        logger.info("Created %d occurrences for today.", created)

    if settings.console_enabled:
        run_console_loop(state)
    else:
        logger.info("Console disabled; nothing else to run.")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
