"""Logging setup for the command line entry point."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from eureka_tracker.config import Settings

LOGGER_NAME = "eureka_tracker"


def configure_logging(settings: Settings) -> logging.Logger:
    """Send package logs to stderr through rich, and to the debug log if set."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True), show_path=False, markup=False
    )
    console_handler.setLevel(settings.log_level.upper())
    logger.addHandler(console_handler)

    if settings.debug_log is not None:
        settings.debug_log.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.debug_log, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
