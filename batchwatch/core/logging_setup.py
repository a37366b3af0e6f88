# File: batchwatch/core/logging_setup.py

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO",
                      log_dir: Optional[Path] = None,
                      file_log: bool = False,
                      stream: Optional[TextIO] = None) -> Optional[Path]:
    """
    Configures the root logger for command line use.

    Always logs to `stream` (stdout by default). When file_log is set, also appends to
    <log_dir>/<YYYY-MM-DD>/info.log and returns that path.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    stream = logging.StreamHandler(stream or sys.stdout)
    stream.setFormatter(formatter)
    root.addHandler(stream)

    log_path = None
    if file_log and log_dir is not None:
        day_dir = Path(log_dir) / date.today().isoformat()
        day_dir.mkdir(parents=True, exist_ok=True)
        log_path = day_dir / "info.log"

        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Silence noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("backoff").setLevel(logging.WARNING)

    if log_path:
        logging.getLogger(__name__).info(f"Logger initialized - log file: {log_path}")
    return log_path
