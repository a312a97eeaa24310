"""Logging configuration and utilities."""

import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

# Package logger; core modules log through hashcc.<module> children
logger = logging.getLogger("hashcc")


def setup_logging(
    level: str = "WARNING",
    log_file: Path | None = None,
    verbose: bool = False,
) -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to log file.
        verbose: If True, include timestamps and logger names.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(logging.DEBUG if log_file else log_level)

    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    if verbose:
        console_format = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    else:
        console_format = logging.Formatter("%(message)s")

    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Always verbose in file

        file_format = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)


class RunLogger:
    """Structured logging for hashing and verification runs with JSONL output."""

    def __init__(self, log_path: Path | None = None) -> None:
        """Initialize run logger.

        Args:
            log_path: Path to JSONL log file.
        """
        self.log_path = log_path
        if log_path:
            log_path.parent.mkdir(parents=True, exist_ok=True)

    def _append(self, entry: dict[str, Any]) -> None:
        if self.log_path:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")

    def log_operation(
        self,
        operation: str,
        path: str,
        success: bool,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log a per-item operation with structured data.

        Args:
            operation: Operation name (hash, verify).
            path: File the operation applied to.
            success: Whether the operation succeeded.
            details: Additional details.
        """
        if success:
            logger.debug(f"{operation}: {path} - success")
        else:
            logger.info(f"{operation}: {path} - failed")

        self._append(
            {
                "timestamp": datetime.now().isoformat(),
                "operation": operation,
                "path": path,
                "success": success,
                "details": details or {},
            }
        )

    def log_error(self, operation: str, path: str, error: BaseException) -> None:
        """Log an item error with its traceback.

        Args:
            operation: Operation that failed.
            path: File the operation applied to.
            error: Exception that occurred.
        """
        details = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "traceback": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        }
        self.log_operation(operation, path, success=False, details=details)

    def log_run_start(self, operation: str, total: int, algorithm: str) -> None:
        """Log start of a run.

        Args:
            operation: Run kind (hash, verify).
            total: Number of items, 0 if unknown up front.
            algorithm: Digest algorithm name.
        """
        logger.debug(f"Starting {operation} run ({algorithm}): {total or 'unknown'} items")
        self._append(
            {
                "timestamp": datetime.now().isoformat(),
                "event": "run_start",
                "operation": operation,
                "total": total,
                "algorithm": algorithm,
            }
        )

    def log_run_complete(
        self,
        operation: str,
        counts: dict[str, int],
        duration_seconds: float,
    ) -> None:
        """Log completion of a run.

        Args:
            operation: Run kind (hash, verify).
            counts: Outcome counts.
            duration_seconds: Total run time.
        """
        summary = ", ".join(f"{count} {name}" for name, count in counts.items())
        logger.debug(f"{operation} complete: {summary} in {duration_seconds:.1f}s")
        self._append(
            {
                "timestamp": datetime.now().isoformat(),
                "event": "run_complete",
                "operation": operation,
                **counts,
                "duration_seconds": duration_seconds,
            }
        )
