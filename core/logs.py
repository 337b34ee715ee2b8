# core/logs.py
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger once per process.
    Streamlit re-executes the script on every interaction, so repeated calls
    only adjust the level.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        # SQLAlchemy echoes every statement at INFO
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        _configured = True

    return root
