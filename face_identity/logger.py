import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import get_settings

ROOT_LOGGER = "face_identity"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach the file and console handlers to the package logger once."""
    settings = get_settings()
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel((level or settings.log_level).upper())
    if root.handlers:
        return root

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(
        settings.log_dir / "face_identity.log",
        maxBytes=2_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)
    # Keep records out of whatever the host application put on the root logger.
    root.propagate = False
    return root


def setup_logger(name: str) -> logging.Logger:
    """Return ``face_identity.<name>``; records flow to the package handlers."""
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        configure_logging()
    return root.getChild(name)
