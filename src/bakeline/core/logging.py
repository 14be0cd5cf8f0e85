"""structlog setup for Bakeline.

configure_logging() runs once from the application lifespan. Output format
follows BAKELINE_LOG_FORMAT: "console" renders colored key/value lines for
the shop-floor terminal, "json" emits one JSON object per line.

Duration fields logged in milliseconds (``delta_ms``, ``overall_ms``, ...)
get an ``HH:MM:SS`` companion so operators can read them at a glance.
"""

import logging
import sys
from typing import Any

import structlog

from bakeline.core.timing.clock import format_duration

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "sqlalchemy.engine")


def add_duration_labels(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add ``<name>_hms`` next to every integer ``<name>_ms`` field."""
    labels = {
        f"{key[:-3]}_hms": format_duration(abs(value))
        for key, value in event_dict.items()
        if key.endswith("_ms") and isinstance(value, int) and not isinstance(value, bool)
    }
    event_dict.update(labels)
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(log_format: str = "console", log_level: str = "INFO") -> None:
    """Route structlog and stdlib logging through one formatter.

    Args:
        log_format: "console" or "json"
        log_level: Root level name; unknown names fall back to INFO
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_duration_labels,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    level = logging.getLevelName(log_level.upper())
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level if isinstance(level, int) else logging.INFO)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
