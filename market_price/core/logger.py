"""
Structured Logging
==================
Event-style logging on top of the stdlib ``logging`` module.

Every entry is a dotted event name plus a data dict, rendered as one JSON
object per line:

    logger.info("subscription_manager.started", {"instrument_count": 10})
    -> {"timestamp": ..., "level": "INFO", "logger": ..., "event_type":
        "subscription_manager.started", "data": {"instrument_count": 10}}
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

_logger_cache: Dict[str, 'StructuredLogger'] = {}
_cache_lock = threading.RLock()

_PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class CustomJsonEncoder(json.JSONEncoder):
    """Serializes enums, exceptions, Decimal and datetime values found in event data."""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseException):
            return f"{type(obj).__name__}: {obj}"
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, (set, frozenset, tuple)):
            return list(obj)
        return repr(obj)


class JsonFormatter(logging.Formatter):
    """One JSON object per record; dict messages are merged into the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "funcName": record.funcName,
            "lineno": record.lineno,
        }
        if isinstance(record.msg, dict):
            entry.update({str(k): v for k, v in record.msg.items()})
        else:
            entry["message"] = record.getMessage()

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, cls=CustomJsonEncoder)


class _FallbackLoggingConfig:
    """Console-only configuration used when settings cannot be loaded."""
    level = "INFO"
    console_enabled = True
    file_enabled = False
    structured_logging = True
    log_dir = "logs"
    max_file_size_mb = 100
    backup_count = 5


class StructuredLogger:
    """
    Thin wrapper around ``logging.Logger`` emitting ``{"event_type", "data"}`` payloads.

    Handlers are attached at most once per destination, so constructing a
    second StructuredLogger for the same name reuses the existing ones.
    """

    def __init__(self, name: str, config: Any, filename: Optional[str] = None):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.propagate = False

        level = getattr(config, 'level', 'INFO')
        level_name = str(getattr(level, 'value', level)).upper()
        self.logger.setLevel(getattr(logging, level_name, logging.INFO))

        structured = getattr(config, 'structured_logging', True)
        formatter = JsonFormatter() if structured else logging.Formatter(_PLAIN_FORMAT)

        if getattr(config, 'console_enabled', True):
            self._attach_console(formatter)

        log_file = self._log_file_path(name, config, filename)
        if log_file:
            self._attach_file(
                log_file,
                formatter,
                max_bytes=getattr(config, 'max_file_size_mb', 100) * 1024 * 1024,
                backup_count=getattr(config, 'backup_count', 5),
            )

    @staticmethod
    def _log_file_path(name: str, config: Any, filename: Optional[str]) -> Optional[str]:
        log_dir = getattr(config, 'log_dir', 'logs')
        if filename:
            return str(Path(log_dir) / filename)
        if getattr(config, 'file_enabled', False):
            return str(Path(log_dir) / f"{name}.jsonl")
        return None

    def _attach_console(self, formatter: logging.Formatter) -> None:
        if any(isinstance(h, logging.StreamHandler) and getattr(h, 'stream', None) is sys.stdout
               for h in self.logger.handlers):
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    def _attach_file(self, log_file: str, formatter: logging.Formatter, max_bytes: int, backup_count: int) -> None:
        target = os.path.abspath(log_file)
        if any(isinstance(h, RotatingFileHandler) and os.path.abspath(h.baseFilename) == target
               for h in self.logger.handlers):
            return

        Path(target).parent.mkdir(parents=True, exist_ok=True)
        try:
            handler = RotatingFileHandler(target, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
        except OSError as e:
            print(f"ERROR: cannot open log file {target}: {e}", file=sys.stderr)
            return
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    def _emit(self, level: int, event_type: str, data: Optional[Dict[str, Any]], exc_info: bool = False) -> None:
        self.logger.log(level, {"event_type": event_type, "data": data or {}}, exc_info=exc_info)

    def debug(self, event_type: str, data: Dict[str, Any] = None):
        self._emit(logging.DEBUG, event_type, data)

    def info(self, event_type: str, data: Dict[str, Any] = None):
        self._emit(logging.INFO, event_type, data)

    def warning(self, event_type: str, data: Dict[str, Any] = None):
        self._emit(logging.WARNING, event_type, data)

    def error(self, event_type: str, data: Dict[str, Any] = None, exc_info: bool = False):
        """Log an error event, optionally with the active exception's traceback."""
        self._emit(logging.ERROR, event_type, data, exc_info=exc_info)

    def is_enabled_for(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)


def _load_logging_config() -> Any:
    from ..infrastructure.config.config_loader import get_settings_from_working_directory
    try:
        return get_settings_from_working_directory().logging
    except Exception as e:
        print(f"WARNING: logging settings unavailable, using console defaults: {e}", file=sys.stderr)
        return _FallbackLoggingConfig()


def get_logger(name: str) -> StructuredLogger:
    """
    Return the StructuredLogger for ``name``, creating it on first use from
    the logging section of the working-directory settings.
    """
    cached = _logger_cache.get(name)
    if cached is not None:
        return cached

    with _cache_lock:
        cached = _logger_cache.get(name)
        if cached is None:
            cached = StructuredLogger(name, _load_logging_config())
            _logger_cache[name] = cached
        return cached
