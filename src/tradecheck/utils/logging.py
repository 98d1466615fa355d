"""Logging setup for the command line and web entry points."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.getenv("TRADECHECK_LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))
