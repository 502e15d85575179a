"""Centralized logging configuration for the Phase 10 tracker."""

from __future__ import annotations

from datetime import datetime
import logging
from pathlib import Path
import sys


LOGGER_NAME = "phase10tracker"


def setup_logging(level: int | str = logging.INFO, log_dir: Path | None = None) -> logging.Logger:
    """Configure the package logger.

    Console output uses a short format. When ``log_dir`` is given, a
    timestamped log file with the detailed format is written there as well.
    Calling this again replaces previously installed handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter("%(levelname)s: %(message)s")

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"phase10_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter)
    logger.addHandler(console_handler)

    return logger
