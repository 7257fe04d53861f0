"""
Unified Logging System

Central logger factory for virtdriver. Every module asks for its logger through
``get_logger(__name__, "<component>")`` so that console and file output share
one format and one configuration point.

Features:
- Cached loggers per (name, component)
- Structured, JSON and simple output formats
- Optional file handler next to the console handler
- Thread-local machine context (machine id, operation) added to records
"""

import sys
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# Thread-local storage for logger contexts
_logger_context = threading.local()


class LogFormat(Enum):
    """Supported log output formats"""
    STRUCTURED = "structured"  # [2025-09-05 02:26:35.150] [INFO] [component] message
    JSON = "json"              # {"timestamp": "...", "level": "INFO", "message": "..."}
    SIMPLE = "simple"          # INFO: message (for console)


@dataclass
class LoggerConfig:
    """Configuration for unified logger"""
    name: str
    level: int = logging.DEBUG

    # File output configuration
    file_path: Optional[Path] = None
    file_level: int = logging.DEBUG
    file_format: LogFormat = LogFormat.STRUCTURED

    # Console output configuration
    console_enabled: bool = True
    console_level: int = logging.WARNING
    console_format: LogFormat = LogFormat.SIMPLE

    component: Optional[str] = None


class LoggerFormatter(logging.Formatter):
    """Custom formatter supporting multiple output formats"""

    def __init__(self, format_type: LogFormat, component: Optional[str] = None):
        self.format_type = format_type
        self.component = component
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(_logger_context, 'context', {})

        if self.format_type == LogFormat.STRUCTURED:
            return self._format_structured(record, context)
        elif self.format_type == LogFormat.JSON:
            return self._format_json(record, context)
        return self._format_simple(record, context)

    def _format_structured(self, record: logging.LogRecord, context: Dict) -> str:
        """Format: [2025-09-05 02:26:35.150] [INFO] [component] message"""
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        component = self.component or context.get('component', record.name.split('.')[-1])

        message = record.getMessage()
        machine_id = context.get('machine_id')
        if machine_id:
            message = f"[VM:{machine_id}] {message}"

        base_msg = f"[{timestamp}] [{record.levelname}] [{component}] {message}"
        if context.get('metadata'):
            base_msg += f"\n  Context: {json.dumps(context['metadata'], indent=2, default=str)}"
        return base_msg

    def _format_json(self, record: logging.LogRecord, context: Dict) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'component': self.component or record.name,
            'message': record.getMessage(),
            'logger': record.name,
            'thread': record.thread,
        }
        log_data.update(context)
        return json.dumps(log_data, ensure_ascii=False, default=str)

    def _format_simple(self, record: logging.LogRecord, context: Dict) -> str:
        return f"{record.levelname}: {record.getMessage()}"


class UnifiedLogger:
    """
    Logger wrapper with context support and multiple output formats.

    Keyword arguments passed to the log methods are attached to the record as
    metadata and rendered by the structured and JSON formats.
    """

    def __init__(self, config: LoggerConfig):
        self.logger = logging.getLogger(config.name)
        self.reconfigure(config)

    def reconfigure(self, config: LoggerConfig):
        """Apply a new configuration, replacing the current handlers"""
        self.config = config
        self.logger.setLevel(config.level)

        # Clear existing handlers to avoid duplication
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.propagate = False

        self._component = config.component
        self._setup_handlers()

    def _setup_handlers(self):
        if self.config.file_path:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.file_path, mode='a', encoding='utf-8')
            file_handler.setLevel(self.config.file_level)
            file_handler.setFormatter(LoggerFormatter(self.config.file_format, self._component))
            self.logger.addHandler(file_handler)

        if self.config.console_enabled:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(self.config.console_level)
            console_handler.setFormatter(LoggerFormatter(self.config.console_format, self._component))
            self.logger.addHandler(console_handler)

    def debug(self, message: str, **kwargs):
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log_with_context(logging.ERROR, message, **kwargs)

    def _log_with_context(self, level: int, message: str, **kwargs):
        old_context = getattr(_logger_context, 'context', {}).copy()

        try:
            current_context = old_context.copy()
            if kwargs:
                current_context['metadata'] = kwargs
            if self._component:
                current_context['component'] = self._component

            _logger_context.context = current_context
            self.logger.log(level, message)
        finally:
            _logger_context.context = old_context


class LoggerFactory:
    """
    Centralized logger factory.
    Provides consistent configuration and formatting across all virtdriver modules.
    """

    _loggers: Dict[str, UnifiedLogger] = {}
    _default_config: Optional[LoggerConfig] = None
    _lock = threading.Lock()

    @classmethod
    def set_default_config(cls, config: LoggerConfig):
        """Set default configuration and rebuild already created loggers"""
        with cls._lock:
            cls._default_config = config
            for existing in cls._loggers.values():
                existing.reconfigure(cls._config_for(existing.config.name, existing.config.component))

    @classmethod
    def _config_for(cls, name: str, component: Optional[str]) -> LoggerConfig:
        default = cls._default_config
        if default is None:
            return LoggerConfig(name=name, component=component or name.split('.')[-1])

        return LoggerConfig(
            name=name,
            level=default.level,
            file_path=default.file_path,
            file_level=default.file_level,
            file_format=default.file_format,
            console_enabled=default.console_enabled,
            console_level=default.console_level,
            console_format=default.console_format,
            component=component or default.component,
        )

    @classmethod
    def get_logger(cls, name: str, component: Optional[str] = None) -> UnifiedLogger:
        """
        Get or create a unified logger for a specific component.

        Args:
            name: Logger name (typically __name__)
            component: Component name for logging context

        Returns:
            UnifiedLogger instance
        """
        with cls._lock:
            cache_key = f"{name}:{component or ''}"
            if cache_key not in cls._loggers:
                cls._loggers[cache_key] = UnifiedLogger(cls._config_for(name, component))
            return cls._loggers[cache_key]

    @classmethod
    def reset(cls):
        """Reset logger factory (useful for testing)"""
        with cls._lock:
            cls._loggers.clear()
            cls._default_config = None


def get_logger(name: str, component: Optional[str] = None) -> UnifiedLogger:
    """Convenience function to get a logger - replaces logging.getLogger()"""
    return LoggerFactory.get_logger(name, component)


class MachineLoggingContext:
    """Context manager tagging every record logged inside it with a machine id"""

    def __init__(self, machine_id: str, **context_kwargs):
        self.context_kwargs = dict(context_kwargs, machine_id=machine_id)
        self.old_context = {}

    def __enter__(self):
        self.old_context = getattr(_logger_context, 'context', {}).copy()
        new_context = self.old_context.copy()
        new_context.update(self.context_kwargs)
        _logger_context.context = new_context
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _logger_context.context = self.old_context
