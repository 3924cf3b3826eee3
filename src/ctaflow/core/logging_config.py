"""Centralized logging configuration for ctaflow.

The engine itself only ever calls ``logging.getLogger(__name__)``; the host
application decides where records go by calling ``configure_logging`` once.

Usage:
    from ctaflow.core.logging_config import configure_logging

    configure_logging(level="DEBUG", format="json")

Environment Variables:
    CTAFLOW_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    CTAFLOW_LOG_FORMAT: Output format ("text" or "json")
    CTAFLOW_LOG_FILE: Optional log file path
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

TEXT_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_configured = False


@dataclass
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Log level name.
        format: "text" or "json".
        file_path: Optional file to log to in addition to stderr.
    """

    level: str = "INFO"
    format: Literal["text", "json"] = "text"
    file_path: str | None = None

    @classmethod
    def from_env(cls) -> LogConfig:
        """Build a config from CTAFLOW_LOG_* variables."""
        fmt = os.environ.get("CTAFLOW_LOG_FORMAT", "text").lower()
        return cls(
            level=os.environ.get("CTAFLOW_LOG_LEVEL", "INFO").upper(),
            format="json" if fmt == "json" else "text",
            file_path=os.environ.get("CTAFLOW_LOG_FILE") or None,
        )


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    {
        "timestamp": "2026-10-19T14:30:00.123000",
        "level": "INFO",
        "logger": "ctaflow.core.builder",
        "message": "flow saved: name=Diwali offer steps=4",
        "extra": {"flow_id": "..."}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


def configure_logging(
    level: str | None = None,
    format: Literal["text", "json"] | None = None,
    file_path: str | None = None,
    force: bool = False,
) -> LogConfig:
    """Configure the root logger.

    Explicit arguments win over CTAFLOW_LOG_* variables. Calls after the
    first are ignored unless force=True.

    Args:
        level: Log level name.
        format: Output format.
        file_path: Optional log file.
        force: Reconfigure even if already configured.

    Returns:
        The effective configuration.
    """
    global _configured

    config = LogConfig.from_env()
    if level:
        config.level = level.upper()
    if format:
        config.format = format
    if file_path:
        config.file_path = file_path

    if _configured and not force:
        return config

    formatter: logging.Formatter
    if config.format == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(getattr(logging, config.level, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if config.file_path:
        file_handler = logging.FileHandler(config.file_path)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _configured = True
    return config


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)
