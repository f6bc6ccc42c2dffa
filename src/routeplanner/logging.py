"""
Unified logging setup for the route planning engine and its tools.

Defaults:
- INFO/DEBUG to stdout, WARNING/ERROR to stderr
- Level INFO (overridable via env)
- Optional JSON format and optional rotating file via env, no static paths

Env options (optional):
- ROUTEPLANNER_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR (default INFO)
- ROUTEPLANNER_LOG_JSON=1 (JSON formatting)
- ROUTEPLANNER_LOG_FILE=/path/to/file.log (RotatingFileHandler)
- ROUTEPLANNER_LOG_DIR=/path/to/dir (uses <service>.log when ROUTEPLANNER_LOG_FILE unset)
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional


_INITIALIZED = False
_DEFAULT_SERVICE = ""
_TRUTHY = ('1', 'true', 'yes', 'on')

__all__ = [
    "setup_logging",
    "get_logger",
    "reset_logging",
]


class _ServiceFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, 'service', None):
            record.service = _DEFAULT_SERVICE
        return True


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'ts': self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S'),
            'level': record.levelname,
            'name': record.name,
            'service': getattr(record, 'service', ''),
            'message': record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class _MinLevelFilter(logging.Filter):
    def __init__(self, min_level: int):
        super().__init__()
        self.min_level = min_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.min_level


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.max_level


def _get_level(default: str = 'INFO') -> int:
    level = os.getenv('ROUTEPLANNER_LOG_LEVEL', default).upper()
    return getattr(logging, level, logging.INFO)


def _use_json(json_format: Optional[bool]) -> bool:
    if json_format is not None:
        return str(json_format).lower() in _TRUTHY
    return os.getenv('ROUTEPLANNER_LOG_JSON', '').lower() in _TRUTHY


def _resolve_log_path(service: str) -> Optional[str]:
    log_path = os.getenv('ROUTEPLANNER_LOG_FILE')
    if not log_path:
        log_dir = os.getenv('ROUTEPLANNER_LOG_DIR')
        if log_dir:
            log_path = str(Path(log_dir) / f'{service}.log')
    return log_path


def setup_logging(
    service: str = 'routeplanner',
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure unified logging once. Safe to call multiple times.

    Args:
        service: service label injected into every record (e.g., 'routeplanner')
        level: optional level override (DEBUG/INFO/...) else from env
        json_format: optional flag to force JSON format, else from env
    """
    global _DEFAULT_SERVICE
    global _INITIALIZED

    if _INITIALIZED:
        return

    root = logging.getLogger()
    root.setLevel(_get_level(level or 'INFO'))

    if _use_json(json_format):
        formatter: logging.Formatter = _JSONFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s [%(service)s] %(message)s')

    service_filter = _ServiceFilter()

    # Split streams: INFO/DEBUG -> stdout, WARNING/ERROR -> stderr
    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(service_filter)
    stdout_handler.addFilter(_MaxLevelFilter(logging.INFO))
    root.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.addFilter(service_filter)
    stderr_handler.addFilter(_MinLevelFilter(logging.WARNING))
    root.addHandler(stderr_handler)

    log_path = _resolve_log_path(service)
    if log_path:
        try:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8'
            )
            fh.setFormatter(formatter)
            fh.addFilter(service_filter)
            root.addHandler(fh)
        except OSError as e:
            root.warning(f"Could not open log file {log_path}, using stdout/stderr only: {e}")

    _DEFAULT_SERVICE = service
    _INITIALIZED = True


def reset_logging() -> None:
    """Drop handlers installed by setup_logging (tests and CLI re-runs)."""
    global _INITIALIZED

    root = logging.getLogger()
    for handler in list(root.handlers):
        if any(isinstance(f, _ServiceFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    _INITIALIZED = False


def get_logger(name: Optional[str] = None, **context) -> logging.LoggerAdapter:
    base = logging.getLogger(name or 'routeplanner')
    # Ensure 'service' in context so formatter always sees it; rely on filter as fallback
    if 'service' not in context:
        context['service'] = _DEFAULT_SERVICE
    return logging.LoggerAdapter(base, context)
