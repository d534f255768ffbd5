from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level_name: str = "INFO", log_file: Optional[str] = None) -> None:
    """Console logging plus an optional rotating file. Safe to call twice."""
    global _configured
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    ch.setLevel(level)
    root.addHandler(ch)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        # rotate at 5MB, keep 7 backups
        fh = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
        fh.setFormatter(logging.Formatter(FORMAT, DATEFMT))
        fh.setLevel(level)
        root.addHandler(fh)

    _configured = True
    logging.getLogger(__name__).info("Logging initialized at %s; file: %s", level_name, log_file)
