"""
Logging configuration for the headless runner and the viewer.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_config: Optional[Dict[str, Any]] = None, *, level_override: Optional[str] = None) -> None:
    """
    Configure the root logger from the `logging` section of a config file.

    Logs go to the console and, when `log_file` is set, to a file rotated at
    1 MB with 5 backups.
    """
    log_config = log_config or {}
    log_level = (level_override or log_config.get("level", "INFO")).upper()
    log_format = log_config.get("format", DEFAULT_FORMAT)
    log_file = log_config.get("log_file")

    root = logging.getLogger()
    root.setLevel(log_level)
    if root.hasHandlers():
        root.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.getLogger(__name__).debug(f"Logging initialised at {log_level}.")
