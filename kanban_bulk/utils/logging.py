"""Logging setup for processes embedding the bulk operations engine."""

import logging
import sys
from typing import Optional

from config.settings import get_settings


def configure_logging(level: Optional[str] = None):
    """Configure root logging once, stdout only."""
    settings = get_settings()
    if level is None:
        level = "DEBUG" if settings.debug else settings.log_level

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
