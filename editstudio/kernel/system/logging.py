import logging
import os
import sys
from typing import Optional

ROOT_LOGGER = "editstudio"
LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"


def _level_from_env(default: int = logging.INFO) -> int:
    name = os.getenv("EDITSTUDIO_LOG_LEVEL", "").upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def _make_handler() -> logging.Handler:
    # Windowed builds start without a console
    if sys.stderr is None:
        return logging.NullHandler()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Configures the package logger on stderr, keeping stdout free for tool output.

    Without an explicit level, EDITSTUDIO_LOG_LEVEL is used (default INFO).
    Repeated calls only change the level; a single handler is installed.
    """
    if level is None:
        level = _level_from_env()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    if not logger.handlers:
        logger.addHandler(_make_handler())
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Sub-logger under the package namespace. Module paths (__name__) inside
    the package are used unchanged.
    """
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
