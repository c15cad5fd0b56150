"""structlog configuration for the command-line entry point.

Library code only calls ``structlog.get_logger(__name__)``; this module
decides where those events go.  Events are rendered to stderr so they
never mix with command output on stdout.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_stdlib_logging(log_level: str) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def setup_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.contextvars.merge_contextvars,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(log_level: str = "INFO") -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging(log_level)
    setup_structlog()


def bind_actor(**kwargs: str) -> None:
    """Tag every following event with who is acting (customer, carrier, owner)."""
    structlog.contextvars.bind_contextvars(**kwargs)
