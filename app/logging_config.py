"""
Structured logging for the location service.

Machine-readable JSON in deployed environments; with DEBUG on, debug
events (superseded lookups, per-lookup counts) are emitted too and
rendered for a terminal.
"""
import logging
import sys

import structlog

from app.config import settings


def _log_level(debug: bool) -> int:
    return logging.DEBUG if debug else logging.INFO


def _renderer(debug: bool):
    if debug:
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def _add_environment(logger, method_name, event_dict):
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


def setup_logging(debug: bool = settings.DEBUG):
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=_log_level(debug),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_environment,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(debug),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger("site_builder")


logger = setup_logging()
