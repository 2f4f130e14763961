#!/usr/bin/env python3
"""Structured logging for modfilter.

This module wraps the standard ``logging`` module with:
- Key-value context attached to every message
- Thread-local context stacks (``add_context``)
- Console and rotating file handlers
- Named, process-wide logger instances

Example:
    >>> logger = get_logger("modfilter.layers")
    >>> with logger.add_context(root="/opt/modules"):
    ...     logger.debug("Added layer", layer="base")
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50

    @classmethod
    def coerce(cls, level: Union["LogLevel", int, str]) -> "LogLevel":
        """Convert a name or number to a LogLevel."""
        if isinstance(level, str):
            return cls[level.upper()]
        return cls(level)


class Logger:
    """Structured logger with context support.

    Messages are rendered as ``message | key=value ...`` and the raw context
    is also attached to the record as ``record.context``.
    """

    _context_stack = threading.local()

    def __init__(
        self,
        name: str = "modfilter",
        level: Union[LogLevel, str] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Args:
            name: Logger name for identification
            level: Minimum log level to output
            handlers: Optional list of logging handlers (default: console)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = False

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create a rotating file handler using the console format.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured rotating file handler
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: New log level (LogLevel or string)
        """
        self.logger.setLevel(LogLevel.coerce(level))

    def get_level(self) -> LogLevel:
        return LogLevel(self.logger.level)

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        return self.logger.isEnabledFor(LogLevel.coerce(level))

    def _stack(self) -> List[Dict[str, Any]]:
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]
        return self._context_stack.stack

    def _get_context(self) -> Dict[str, Any]:
        context: Dict[str, Any] = {}
        for frame in self._stack():
            context.update(frame)
        return context

    @staticmethod
    def _format_message(msg: str, context: Dict[str, Any]) -> str:
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs):
        """Attach context to every message logged inside the block.

        Example:
            >>> with logger.add_context(module="com.acme.lib"):
            ...     logger.info("Resolved dependency")
        """
        stack = self._stack()
        stack.append(kwargs)
        try:
            yield
        finally:
            stack.pop()

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any], **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        combined = self._get_context()
        combined.update(context)
        self.logger.log(
            level, self._format_message(msg, combined), extra={"context": combined}, **kwargs
        )

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, context)

    def exception(self, msg: str, exc: Exception, **context) -> None:
        """Log an exception with its traceback at ERROR level."""
        context["exception_type"] = type(exc).__name__
        context["exception_message"] = str(exc)
        self._log(LogLevel.ERROR, msg, context, exc_info=exc)


_loggers: Dict[str, Logger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str = "modfilter") -> Logger:
    """Get or create the process-wide logger with the given name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    with _loggers_lock:
        logger = _loggers.get(name)
        if logger is None:
            logger = Logger(name=name)
            _loggers[name] = logger
        return logger


def set_global_logger(logger: Logger) -> None:
    """Register a logger so ``get_logger(logger.name)`` returns it.

    Args:
        logger: Logger to use globally
    """
    with _loggers_lock:
        _loggers[logger.name] = logger


def configure_logging(level: Union[LogLevel, str], log_file: Optional[str] = None) -> None:
    """Apply a level, and optionally a log file, to every registered logger.

    Args:
        level: Minimum log level
        log_file: Optional path of a rotating log file shared by all loggers
    """
    with _loggers_lock:
        loggers = list(_loggers.values())
    for logger in loggers:
        logger.set_level(level)
        if log_file:
            logger.add_handler(logger.create_file_handler(log_file))
