"""
Centralized logging for the Product Catalog Service.

Provides a single structured logger with:
- Correlation IDs taken from the request context
- Console (colored) and JSON output formats
- Runtime level changes driven by the feature flag poller
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from app.core.config import config
from app.utils.correlation_id import get_correlation_id

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# LogRecord attributes that are not user supplied
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName",
}


def normalize_level(level: Optional[str]) -> Optional[str]:
    """Canonical level name (WARN becomes WARNING), or None if unknown"""
    if not level:
        return None
    name = str(level).strip().upper()
    if name == "WARN":
        name = "WARNING"
    return name if name in VALID_LEVELS else None


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": config.service_name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for development"""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        line = f"{color}[{timestamp}] {record.levelname}{reset} - {record.getMessage()}"

        correlation_id = getattr(record, "correlationId", None)
        if correlation_id:
            line += f" [{correlation_id}]"

        metadata = getattr(record, "metadata", None)
        if metadata:
            line += f" {json.dumps(metadata, default=str)}"

        return line


class StructuredLogger:
    """
    Structured logger with correlation IDs and a mutable level.
    """

    def __init__(self, name: Optional[str] = None, level: Optional[str] = None, fmt: Optional[str] = None):
        self.service_name = config.service_name
        self.environment = config.environment
        self._format = (fmt or config.log_format).lower()
        self._logger = logging.getLogger(name or self.service_name)
        self._logger.propagate = False
        self._setup_logging(normalize_level(level or config.log_level) or "INFO")

    def _setup_logging(self, level: str):
        """Attach a single stdout handler with the configured formatter"""
        self._logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        if self._format == "json":
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(ConsoleFormatter())

        self._logger.addHandler(handler)
        self._logger.setLevel(getattr(logging, level))

    def get_level(self) -> str:
        """Name of the currently effective level"""
        return logging.getLevelName(self._logger.level)

    def set_level(self, level: str) -> bool:
        """
        Switch the logger to a new level.

        Returns:
            True if the level was applied, False if the name is unknown
        """
        name = normalize_level(level)
        if name is None:
            self.warning(
                f"Ignoring unknown log level '{level}'",
                metadata={"event": "log_level_ignored", "requested": level}
            )
            return False
        self._logger.setLevel(getattr(logging, name))
        return True

    def _build_extra(
        self,
        correlation_id: Optional[str],
        metadata: Optional[Dict[str, Any]],
        **kwargs
    ) -> Dict[str, Any]:
        extra = {
            "environment": self.environment,
            "correlationId": correlation_id or get_correlation_id(),
        }
        if metadata:
            extra["metadata"] = metadata
        extra.update(kwargs)
        return extra

    def _log(
        self,
        level: int,
        message: str,
        correlation_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra=self._build_extra(correlation_id, metadata, **kwargs))

    def debug(self, message: str, correlation_id: Optional[str] = None,
              metadata: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.DEBUG, message, correlation_id, metadata, **kwargs)

    def info(self, message: str, correlation_id: Optional[str] = None,
             metadata: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.INFO, message, correlation_id, metadata, **kwargs)

    def warning(self, message: str, correlation_id: Optional[str] = None,
                metadata: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.WARNING, message, correlation_id, metadata, **kwargs)

    def error(
        self,
        message: str,
        correlation_id: Optional[str] = None,
        error: Optional[Union[str, Exception]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        """Error level logging"""
        if metadata is None:
            metadata = {}

        if error:
            if isinstance(error, Exception):
                metadata["error"] = {
                    "type": type(error).__name__,
                    "message": str(error),
                }
            else:
                metadata["error"] = {"message": str(error)}

        self._log(logging.ERROR, message, correlation_id, metadata, **kwargs)

    def critical(self, message: str, correlation_id: Optional[str] = None,
                 metadata: Optional[Dict[str, Any]] = None, **kwargs):
        self._log(logging.CRITICAL, message, correlation_id, metadata, **kwargs)


# Create and export the logger instance
logger = StructuredLogger()
