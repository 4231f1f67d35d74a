"""Logging setup for the idea validator backend."""

import logging
import sys
from typing import Optional

from .config import get_settings

NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "openai")


def setup_logging(level_override: Optional[str] = None) -> None:
    level_name = (level_override or get_settings().log_level or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stdout,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
