#!/usr/bin/env python3

"""Progress tracking for the debug info walk."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import time
from typing import Any


class ProgressTracker:
    """
    Count compile units, DIEs and extracted entries during one load.

    Provides timing context managers for whole operations and single
    compile units, plus a summary line at the end of the walk.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize progress tracker.

        Args:
            logger: Logger instance for progress reporting
        """
        self.logger = logger
        self.start_time = time()
        self.cu_count = 0
        self.die_count = 0
        self.variable_count = 0
        self.skipped_count = 0

    @contextmanager
    def track_operation(self, operation_name: str) -> Iterator[None]:
        """
        Track a high-level operation with timing.

        Args:
            operation_name: Name of the operation being tracked
        """
        start_time = time()
        self.logger.debug(f"Starting operation: {operation_name}")

        try:
            yield
        except Exception as e:
            self.logger.error(
                f"Failed operation: {operation_name} after {time() - start_time:.3f}s: {e}"
            )
            raise

        self.logger.debug(f"Completed operation: {operation_name} in {time() - start_time:.3f}s")

    @contextmanager
    def track_cu(self, cu: Any) -> Iterator[None]:
        """
        Track the walk over one compilation unit.

        Args:
            cu: Compilation unit being processed
        """
        self.cu_count += 1
        cu_start = time()
        cu_offset = getattr(cu, "cu_offset", 0)
        initial_die_count = self.die_count

        self.logger.debug(f"Processing CU #{self.cu_count} at 0x{cu_offset:x}")

        try:
            yield
        except Exception as e:
            self.logger.error(f"CU #{self.cu_count} failed after {time() - cu_start:.3f}s: {e}")
            raise

        self.logger.debug(
            f"CU #{self.cu_count} completed in {time() - cu_start:.3f}s "
            f"({self.die_count - initial_die_count} DIEs processed)"
        )

    def count_die(self) -> None:
        self.die_count += 1

    def count_variable(self) -> None:
        self.variable_count += 1

    def count_skipped(self) -> None:
        self.skipped_count += 1

    def report_summary(self) -> None:
        """Report final processing statistics."""
        total_time = time() - self.start_time
        avg_die_rate = self.die_count / total_time if total_time > 0 else 0

        self.logger.info(
            f"Processed {self.cu_count} CUs, {self.die_count} DIEs in {total_time:.2f}s "
            f"({avg_die_rate:.1f} DIEs/s): {self.variable_count} variables, "
            f"{self.skipped_count} skipped"
        )
