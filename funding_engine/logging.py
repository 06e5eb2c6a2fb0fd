"""Structured logging configuration for funding-engine.

Besides the global level, individual loggers can be tuned, for example to
trace the lifecycle manager without turning on DEBUG for the whole engine::

    LOG_MODULE_LEVELS="funding_engine.notifications=DEBUG,funding_engine.store=WARNING"
"""

import logging
import sys
from typing import Any, Mapping

from funding_engine.exceptions import ConfigurationError

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_module_levels(value: str) -> dict[str, str]:
    """Parse a ``logger=LEVEL`` list separated by commas.

    Parameters
    ----------
    value : str
        E.g. ``"funding_engine.notifications=DEBUG"``. Blank input yields an
        empty mapping.

    Returns
    -------
    dict[str, str]
        Logger name to upper-cased level name.
    """
    levels: dict[str, str] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, level = item.partition("=")
        name, level = name.strip(), level.strip().upper()
        if not sep or not name:
            raise ConfigurationError(f"Invalid module log level entry: {item!r}")
        if level not in _LEVEL_NAMES:
            raise ConfigurationError(f"Unknown log level {level!r} for {name}")
        levels[name] = level
    return levels


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    module_levels: Mapping[str, str] | None = None,
) -> None:
    """Configure logging for funding-engine.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    module_levels : Mapping[str, str], optional
        Per-logger overrides applied after the global level.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    overrides = {
        name: getattr(logging, module_level.upper(), logging.INFO)
        for name, module_level in (module_levels or {}).items()
    }

    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # The handler must let through the most verbose override
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(min([log_level, *overrides.values()]))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("funding_engine").setLevel(log_level)

    # Faker logs locale resolution at DEBUG
    logging.getLogger("faker").setLevel(logging.WARNING)

    for name, module_level in overrides.items():
        logging.getLogger(name).setLevel(module_level)


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        import json
        from datetime import datetime, timezone

        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).

    Returns
    -------
    logging.Logger
        Configured logger.
    """
    return logging.getLogger(name)
