"""Logging setup."""

import logging

from dispute_evidence.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # web3 request logging is noisy at DEBUG
    logging.getLogger("web3").setLevel(max(level, logging.INFO))
