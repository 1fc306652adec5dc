"""
Application logger.
"""

import logging

from niko.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the root handler once and return the app logger."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_FORMAT)
    app_logger = logging.getLogger("niko")
    app_logger.setLevel((level or get_settings().LOG_LEVEL).upper())
    return app_logger


logger = setup_logging()
