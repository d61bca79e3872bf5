#!/usr/bin/env python3

"""Logger setup and configuration for the application."""

import logging
import sys
from datetime import datetime
from pathlib import Path


class LoggerSetup:
    """Configures the root logger once per process."""

    _initialized = False
    _log_file_path: Path | None = None

    @classmethod
    def initialize(cls, log_dir: Path | None, verbose: bool = False) -> None:
        """
        Initialize the logging system with console and file handlers.

        Args:
            log_dir: Existing directory for the timestamped log file; None disables
                file logging
            verbose: If True, set console to DEBUG level; otherwise INFO
        """
        if cls._initialized:
            return

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        root_logger.handlers.clear()

        # Results go to stdout, so diagnostics use stderr
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root_logger.addHandler(console_handler)

        if log_dir is not None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            cls._log_file_path = log_dir / f"dwarf_symbol_resolver_{timestamp}.log"

            file_handler = logging.FileHandler(cls._log_file_path, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            root_logger.addHandler(file_handler)

        cls._initialized = True

        logger = logging.getLogger(__name__)
        if cls._log_file_path is not None:
            logger.debug(f"Logging initialized. Log file: {cls._log_file_path}")
        logger.debug(f"Verbose mode: {verbose}")

    @classmethod
    def get_log_file_path(cls) -> Path | None:
        """Get the current log file path."""
        return cls._log_file_path

    @classmethod
    def reset(cls) -> None:
        """Forget the previous initialization (used by tests)."""
        cls._initialized = False
        cls._log_file_path = None
