"""File-backed loggers shared by the background services."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def ensure_logger(name: str, path: Union[Path, str]) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


__all__ = ["LOG_FORMAT", "ensure_logger"]
