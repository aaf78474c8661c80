#!/usr/bin/env python
import logging
from pathlib import Path
from typing import Optional

from compressing_rotating_file_handler import CompressingRotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class LoggingManager:
    """
    Manages application logging configuration.
    """
    def __init__(self, log_file: Path) -> None:
        self.log_file = log_file
        self.handler: Optional[CompressingRotatingFileHandler] = None

    def setup(self, level: int = logging.INFO, max_bytes: int = 10 * 1024 * 1024, backup_count: int = 10) -> None:
        """
        Route the root logger to a rotating, compressing log file.

        Args:
            level: Logging level
            max_bytes: Maximum log file size before rotation
            backup_count: Number of compressed archives to keep
        """
        self.handler = CompressingRotatingFileHandler(
            filename=str(self.log_file),
            mode="a",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        self.handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Remove any existing handlers to prevent duplicate logs
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        root_logger.addHandler(self.handler)
        logging.info(f"Logging to {self.log_file} at level {logging.getLevelName(level)}")

    def shutdown(self) -> None:
        """
        Detach and close the log handler.
        """
        if self.handler:
            logging.info("Logging system shutdown")
            logging.getLogger().removeHandler(self.handler)
            self.handler.close()
            self.handler = None
