# tasktracker/logging_setup.py

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog and route stdlib logging (uvicorn, sqlalchemy) through
    the same output stream.

    - json_logs=True: one JSON object per line, for log shippers
    - json_logs=False: coloured console output for local development

    The structlog settings of the last call win. The stdlib handler is only
    installed when the root logger has none (uvicorn and pytest bring their own).
    """
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        tail = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        tail = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*shared_processors, *tail],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # Third-party libraries keep using stdlib logging; give them a plain handler.
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
