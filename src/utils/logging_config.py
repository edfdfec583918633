"""
Logging setup for blib

Library modules only create module loggers; applications (the CLI, tests)
decide how records are rendered by calling configure_logging().

Environment:
    BLIB_LOG_LEVEL: Level name for the blib loggers (default INFO)
    JSON_LOGGING: "true" switches the console output to JSON lines
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from src.utils.correlation import correlation_id_filter

ROOT_LOGGER_NAME = "src"

# Extra attributes copied into JSON output when present on a record
EXTRA_FIELDS = ("operation", "table", "changes", "error_kind")


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter with correlation ID support."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'correlation_id': getattr(record, 'correlation_id', 'N/A'),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _env_flag(name: str) -> bool:
    return os.getenv(name, 'false').lower() == 'true'


def configure_logging(
    level: Optional[Union[str, int]] = None,
    json_output: Optional[bool] = None,
    handler: Optional[logging.Handler] = None,
    loggers: Sequence[str] = ()
) -> logging.Logger:
    """
    Configure the package logger and, optionally, application loggers.

    Args:
        level: Log level (defaults to BLIB_LOG_LEVEL or INFO)
        json_output: Emit JSON lines (defaults to JSON_LOGGING env var)
        handler: Handler to install instead of a stderr StreamHandler
        loggers: Further logger names (e.g. a script's __name__) that get
            the same handler and level

    Returns:
        The configured package logger
    """
    if level is None:
        level = os.getenv('BLIB_LOG_LEVEL', 'INFO').upper()
    if json_output is None:
        json_output = _env_flag('JSON_LOGGING')

    handler = handler or logging.StreamHandler()
    if json_output:
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
    handler.addFilter(correlation_id_filter)

    for name in (ROOT_LOGGER_NAME, *loggers):
        target = logging.getLogger(name)
        # Reconfiguring replaces earlier handlers instead of stacking them
        for existing in list(target.handlers):
            target.removeHandler(existing)

        target.setLevel(level)
        target.addHandler(handler)
        target.propagate = False

    return logging.getLogger(ROOT_LOGGER_NAME)
