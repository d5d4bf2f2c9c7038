"""Logging configuration for the discography pipeline."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    level: str = "INFO", log_file: Optional[Path] = None, verbose: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Set up logging on the package logger."""

    # Suppress noisy third-party library logs
    logging.getLogger("PIL").setLevel(logging.WARNING)

    logger = logging.getLogger("discography")
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=verbose,
        markup=False,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
