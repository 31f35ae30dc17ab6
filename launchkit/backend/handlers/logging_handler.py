"""
LoggingHandler module for managing logging operations.
This module handles log file creation, rotation, and management.
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..models.configuration import RuntimeEnvironment

DEFAULT_LOG_FILE = "launchkit.log"


class LoggingHandler:
    """
    Central logging handler for launchkit.
    - Uses <launcher_dir>/logs/ as the log directory.
    - Rotates the log file once per run, then by size while running.
    Usage:
        handler = LoggingHandler(runtime)
        handler.rotate_log_for_logger('launchkit')
        logger = handler.setup_logger('launchkit')
    """
    def __init__(self, runtime_environment: Optional[RuntimeEnvironment] = None,
                 log_dir: Optional[Path] = None):
        from ...shared.paths import get_launchkit_logs_dir
        self.log_dir = Path(log_dir) if log_dir else get_launchkit_logs_dir(runtime_environment)
        self.ensure_log_directory()

    def ensure_log_directory(self) -> None:
        """Ensure the log directory exists."""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.getLogger(__name__).error(f"Failed to create log directory: {e}")

    def rotate_log_file_per_run(self, log_file_path: Path, backup_count: int = 5):
        """Rotate the log file on every run, keeping up to backup_count backups."""
        if not log_file_path.exists():
            return
        # Remove the oldest backup if it exists
        oldest = log_file_path.with_suffix(log_file_path.suffix + f'.{backup_count}')
        if oldest.exists():
            oldest.unlink()
        # Shift backups
        for i in range(backup_count - 1, 0, -1):
            src = log_file_path.with_suffix(log_file_path.suffix + f'.{i}')
            dst = log_file_path.with_suffix(log_file_path.suffix + f'.{i+1}')
            if src.exists():
                src.rename(dst)
        # Move current log to .1
        log_file_path.rename(log_file_path.with_suffix(log_file_path.suffix + '.1'))

    def rotate_log_for_logger(self, name: str, log_file: Optional[str] = None, backup_count: int = 5):
        """
        Rotate the log file for a logger before any logging occurs.
        Must be called BEFORE any log is written or file handler is attached.
        """
        file_path = self.log_dir / (log_file if log_file else DEFAULT_LOG_FILE)
        self.rotate_log_file_per_run(file_path, backup_count=backup_count)

    def setup_logger(self, name: str, log_file: Optional[str] = None) -> logging.Logger:
        """Set up a logger with file and console handlers. Call rotate_log_for_logger before this if you want per-run rotation."""
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_formatter = logging.Formatter(
            '%(levelname)s: %(message)s'
        )

        # Console handler (ERROR and above only)
        if not any(type(h) is logging.StreamHandler for h in logger.handlers):
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.ERROR)
            console_handler.setFormatter(console_formatter)
            logger.addHandler(console_handler)

        file_path = self.log_dir / (log_file if log_file else DEFAULT_LOG_FILE)
        if not any(isinstance(h, logging.handlers.RotatingFileHandler)
                   and getattr(h, 'baseFilename', None) == str(file_path) for h in logger.handlers):
            file_handler = logging.handlers.RotatingFileHandler(
                file_path, mode='a', encoding='utf-8', maxBytes=1024*1024, backupCount=5
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        return logger

    def cleanup_old_logs(self, days: int = 30) -> None:
        """Clean up log files older than specified days."""
        cutoff = datetime.now().timestamp() - (days * 24 * 60 * 60)
        for log_file in self.get_log_files():
            try:
                if log_file.stat().st_mtime < cutoff:
                    log_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning(f"Failed to clean up log file {log_file}: {e}")

    def get_log_files(self) -> List[Path]:
        """Get a list of all log files."""
        return sorted(self.log_dir.glob("*.log"))
