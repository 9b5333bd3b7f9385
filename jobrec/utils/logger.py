"""Logging configuration"""
import logging
import os
from rich.logging import RichHandler


def setup_logger(name: str = "jobrec", level: int = logging.INFO) -> logging.Logger:
    """Setup logger with rich formatting"""
    logger = logging.getLogger(name)
    logger.setLevel(os.getenv("JOBREC_LOG_LEVEL", logging.getLevelName(level)).upper())

    if not logger.handlers:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger

# Global logger instance
logger = setup_logger()
