"""File logging setup; the terminal itself belongs to the UI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOGGER_NAME = "beadboard"
LOG_FILENAME = "beadboard.log"
LOG_MAX_BYTES = 2_000_000
LOG_BACKUP_COUNT = 2
LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str = "WARNING", log_path: Path | None = None) -> Path | None:
    """Attach a rotating file handler to the ``beadboard`` logger.

    Returns the log path, or ``None`` when the log directory is not writable
    (logging then stays disabled rather than failing startup).
    """
    logger = logging.getLogger(LOGGER_NAME)
    lvl = getattr(logging, str(level).upper(), logging.WARNING)
    logger.setLevel(lvl)
    logger.propagate = False
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()

    path = log_path or default_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None
    fh.setLevel(lvl)
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(fh)
    return path
