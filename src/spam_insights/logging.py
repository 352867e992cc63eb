from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVEL_ENV = "SPAM_INSIGHTS_LOG_LEVEL"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or os.getenv(LOG_LEVEL_ENV) or "WARNING").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
