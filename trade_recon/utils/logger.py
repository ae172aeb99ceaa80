"""Logging configuration and utilities for the reconciliation system."""

import logging
import os
from typing import Optional

from trade_recon.config.settings import LOG_LEVEL, LOG_FORMAT, LOGS_DIR


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = LOG_LEVEL,
    logs_dir: str = LOGS_DIR,
    log_format: str = LOG_FORMAT
) -> logging.Logger:
    """Set up a logger with console and file handlers.

    Args:
        name: Logger name.
        log_file: Optional log file name. If None, uses logger name.
        level: Logging level.
        logs_dir: Directory receiving the log file.
        log_format: Format string shared by both handlers.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is None:
        log_file = f"{name}.log"

    log_path = os.path.join(logs_dir, log_file)
    os.makedirs(logs_dir, exist_ok=True)

    file_handler = logging.FileHandler(log_path)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


class ReconciliationLogger:
    """Logger bound to a single ledger reconciliation run."""

    def __init__(self, run_id: str, logs_dir: str = LOGS_DIR, level: str = LOG_LEVEL) -> None:
        """Initialize the run logger.

        Args:
            run_id: Identifier of the run, usually the ledger file stem.
            logs_dir: Directory receiving the run log file.
            level: Logging level.
        """
        self.run_id = run_id
        self.logger = setup_logger(f"reconciliation.{run_id}", level=level, logs_dir=logs_dir)

    def log_start(self, source: str) -> None:
        """Log the start of a run for a ledger source."""
        self.logger.info(f"Started reconciliation run {self.run_id} for ledger: {source}")

    def log_progress(self, message: str) -> None:
        """Log run progress."""
        self.logger.info(f"Run {self.run_id}: {message}")

    def log_error(self, error: Exception, context: str = "") -> None:
        """Log a run error with its traceback.

        Args:
            error: Exception that occurred.
            context: Additional context information.
        """
        error_msg = f"Run {self.run_id}: Error in {context}: {str(error)}"
        self.logger.error(error_msg, exc_info=True)

    def log_completion(self, output_path: str) -> None:
        """Log run completion."""
        self.logger.info(f"Run {self.run_id}: Completed successfully. Output: {output_path}")
