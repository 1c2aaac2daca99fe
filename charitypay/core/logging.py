"""Logging setup."""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once per process."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
        level=level.upper(),
    )
    # Request lines from httpx would echo processor URLs on every call
    logging.getLogger("httpx").setLevel(logging.WARNING)
