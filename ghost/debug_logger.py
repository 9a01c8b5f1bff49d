#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Centralized debug logging system for the ghost CLI.

Every module logs through ``logging.getLogger(__name__)``, which places its
records under the ``ghost`` namespace. When debug logging is enabled with the
--debug flag, a file handler is attached to that namespace and structured
events (external commands, errors) are written alongside the plain records.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ghost import config


def prune_old_logs(log_dir: Path, keep: int) -> None:
    """Remove old log files beyond the configured retention limit."""

    if keep < 1 or not log_dir.exists():
        return

    log_files = sorted(
        [path for path in log_dir.glob("*.log") if path.is_file()],
        key=lambda path: path.stat().st_mtime,
        reverse=True,
    )

    for stale_file in log_files[keep:]:
        try:
            stale_file.unlink()
        except OSError:
            # Another process may have removed it already
            continue


class DebugLogger:
    """Centralized debug logger with component-specific logging."""

    _instance: Optional['DebugLogger'] = None
    _enabled: bool = False
    _log_file: Optional[Path] = None
    _loggers: Dict[str, logging.Logger] = {}

    def __init__(self, enabled: bool = False, log_dir: Optional[Path] = None):
        """Initialize the debug logger.

        Args:
            enabled: Whether debug logging is enabled
            log_dir: Directory to store log files (defaults to .ghost/logs/)
        """
        self._enabled = enabled

        if enabled:
            if log_dir is None:
                log_dir = config.LOGS_DIR
            log_dir.mkdir(exist_ok=True, parents=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self._log_file = log_dir / f"ghost_debug_{timestamp}.log"

            self._setup_logging()

            prune_old_logs(log_dir, config.LOG_RETENTION_LIMIT)

            self.log("system", "DEBUG_SESSION_START", {
                "timestamp": datetime.now().isoformat(),
                "log_file": str(self._log_file),
                "cwd": str(Path.cwd())
            })

    @classmethod
    def initialize(cls, enabled: bool = False, log_dir: Optional[Path] = None) -> 'DebugLogger':
        """Initialize the global debug logger instance."""
        if cls._instance is None:
            cls._instance = cls(enabled, log_dir)
        return cls._instance

    @classmethod
    def get_instance(cls) -> 'DebugLogger':
        """Get the global debug logger instance."""
        if cls._instance is None:
            cls._instance = cls(enabled=False)
        return cls._instance

    def _setup_logging(self):
        """Attach the file handler to the ``ghost`` logger namespace."""
        formatter = logging.Formatter(
            '%(asctime)s | %(name)-24s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        file_handler = logging.FileHandler(self._log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)

        root_logger = logging.getLogger('ghost')
        root_logger.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    def get_logger(self, component: str) -> logging.Logger:
        """Get or create a logger for a specific component (e.g. 'git', 'cli')."""
        if component not in self._loggers:
            self._loggers[component] = logging.getLogger(f'ghost.{component}')
        return self._loggers[component]

    def log(self, component: str, event: str, data: Optional[Dict[str, Any]] = None, level: str = "INFO"):
        """Log a structured event.

        Args:
            component: Component name (e.g., 'git', 'runner', 'cli')
            event: Event type/name
            data: Optional dictionary of event data
            level: Log level (DEBUG, INFO, WARNING, ERROR)
        """
        if not self._enabled:
            return

        logger = self.get_logger(component)

        message = f"[{event}]"
        if data:
            message += f" {json.dumps(data, indent=2, default=str)}"

        log_level = getattr(logging, level.upper(), logging.INFO)
        logger.log(log_level, message)

    def log_command(
        self,
        args: List[str],
        cwd: str,
        returncode: Optional[int],
        error: Optional[str] = None,
    ):
        """Log one external command invocation and its outcome."""
        if not self._enabled:
            return

        data: Dict[str, Any] = {
            "args": [str(arg)[:200] for arg in args],
            "cwd": cwd,
            "returncode": returncode,
        }
        if error:
            data["error"] = error[:500]
            level = "ERROR"
        else:
            level = "DEBUG"

        self.log("runner", "COMMAND", data, level)

    def log_error(self, component: str, error: Exception, context: Optional[Dict[str, Any]] = None):
        """Log an error with context."""
        if not self._enabled:
            return

        data = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        if context:
            data["context"] = context

        self.log(component, "ERROR", data, "ERROR")

    def _log_plain(self, level: str, msg: str, *args: Any, **kwargs: Any) -> None:
        if not self._enabled:
            return

        logger = self.get_logger("general")
        log_level = getattr(logging, level.upper(), logging.INFO)
        logger.log(log_level, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an informational message when debug logging is enabled."""
        self._log_plain("INFO", msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning message when debug logging is enabled."""
        self._log_plain("WARNING", msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an error message when debug logging is enabled."""
        self._log_plain("ERROR", msg, *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug message when debug logging is enabled."""
        self._log_plain("DEBUG", msg, *args, **kwargs)

    @property
    def enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self._enabled

    @property
    def log_file_path(self) -> Optional[Path]:
        """Get the path to the current log file."""
        return self._log_file

    def close(self):
        """Close the logger and write session end marker."""
        if self._enabled:
            self.log("system", "DEBUG_SESSION_END", {
                "timestamp": datetime.now().isoformat()
            })

            root_logger = logging.getLogger('ghost')
            for handler in root_logger.handlers[:]:
                handler.close()
                root_logger.removeHandler(handler)


# Convenience functions for global logger access
def get_logger() -> DebugLogger:
    """Get the global debug logger instance."""
    return DebugLogger.get_instance()


def is_debug_enabled() -> bool:
    """Check if debug logging is enabled."""
    return get_logger().enabled
