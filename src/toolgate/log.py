"""
Logging setup for toolgate.

Modules log through the standard library:

    logger = logging.getLogger(__name__)

Nothing is configured on import, so library users keep control of their own
logging tree. The CLI calls configure_logging() when --verbose is passed.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

ROOT_LOGGER = "toolgate"

# Extra record attributes surfaced by the formatter
_EXTRA_KEYS = ("tool_name", "trust", "capability", "resolved_path", "rule")


class ToolgateFormatter(logging.Formatter):
    """Human-readable or JSON log lines."""

    def __init__(self, json_output: bool = False) -> None:
        super().__init__()
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if self._json_output:
            return json.dumps(log_data, default=str)

        extras = {k: v for k, v in log_data.items() if k in _EXTRA_KEYS}
        extra_str = ""
        if extras:
            extra_str = " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        return (
            f"[{log_data['timestamp']}] {record.levelname:8s} "
            f"{record.name}: {log_data['message']}{extra_str}"
        )


def configure_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """
    Install a single stderr handler on the toolgate logger.

    Calling this again replaces the previous handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        json_output: Emit one JSON object per line

    Returns:
        The configured toolgate logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ToolgateFormatter(json_output=json_output))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
