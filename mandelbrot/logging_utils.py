"""
logging_utils.py - console (and optional file) logging for the command-line tools.
"""

__all__ = ["configure_logging", "ColorFormatter"]

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from colorama import Fore, Style, init as colorama_init

PathLike = Union[str, os.PathLike]


class ColorFormatter(logging.Formatter):
    """Colorized console formatter."""
    COLORS = {
        "DEBUG":    Fore.CYAN,
        "INFO":     Fore.GREEN,
        "WARNING":  Fore.YELLOW,
        "ERROR":    Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        reset = Style.RESET_ALL
        return (
            f"[{self.formatTime(record, self.datefmt)}] "
            f"[{record.threadName}] "
            f"[{color}{record.levelname:<5s}{reset}] "
            f"{record.getMessage()}"
        )


def configure_logging(level: int = logging.INFO,
                      log_file: Optional[PathLike] = None,
                      name: str = "mandelbrot") -> logging.Logger:
    """Attach a colorized console handler, plus a rotating file when requested."""
    colorama_init(strip=False)
    datefmt = "%H:%M:%S"

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    ch = logging.StreamHandler()
    ch.setFormatter(ColorFormatter(datefmt=datefmt))
    logger.addHandler(ch)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5)
        fh.setFormatter(logging.Formatter("[%(asctime)s] [%(threadName)s] [%(levelname)-5s] %(message)s", datefmt))
        logger.addHandler(fh)

    return logger
