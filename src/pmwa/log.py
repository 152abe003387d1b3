from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler


def setup_logging(
    log_dir: Path,
    level: str = "INFO",
    log_file: str = "pmwa.log",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Configure the "pmwa" logger:
      - console via rich
      - rotating text file in log_dir
    Safe to call twice; handlers are replaced, not stacked.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger("pmwa")
    root.setLevel(level.upper())
    root.handlers.clear()
    root.propagate = False

    console = RichHandler(show_path=False, rich_tracebacks=True)
    console.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console)

    fh = RotatingFileHandler(log_dir / log_file, maxBytes=max_bytes, backupCount=backup_count)
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(fh)
