"""Process-wide logging setup."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Apply the service log format at the requested level."""

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("watchparty_signaling").setLevel(level.upper())
