from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = str(Path(tempfile.gettempdir()) / "winget-bootstrap.log")


def configure_logging(
    log_path: Optional[str] = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    quiet: bool = False,
) -> Optional[str]:
    """Configure logging.

    Notes:
    - Console lines carry the level name, so informational output is
      distinguishable from warnings and errors.
    - quiet raises the console threshold to WARNING; the log file keeps
      everything at `level`.
    - If log_path cannot be opened we fall back to a file in the working
      directory. log_path=None logs to the console only.

    Returns the actual file path being used, or None.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_winget_bootstrap_configured", False):
        return getattr(logger, "_winget_bootstrap_log_path", log_path)

    chosen_path: Optional[str] = None
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    if log_path:
        file_handler: logging.Handler
        try:
            Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            chosen_path = log_path
        except OSError:
            fallback = str(Path.cwd() / "winget-bootstrap.log")
            file_handler = logging.FileHandler(fallback, encoding="utf-8")
            chosen_path = fallback
        file_handler.setFormatter(fmt)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(logging.WARNING if quiet else level)
    handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_winget_bootstrap_configured", True)
    setattr(logger, "_winget_bootstrap_log_path", chosen_path)

    logging.getLogger(__name__).info("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path
