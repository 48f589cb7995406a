"""Loguru sink setup."""

import sys

from loguru import logger

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default stderr sink with one at ``level``.

    Streamlit re-executes the page script on every interaction, so only the
    first call installs the sink.
    """
    global _configured
    if _configured:
        return

    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    _configured = True
    logger.debug(f"Logging configured at level {level.upper()}")
