# storefront/utils/logging.py
"""
Structured logging for the storefront service.

structlog runs on top of the stdlib logging tree so uvicorn, SQLAlchemy
and Celery records go through the same renderer.
"""
import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter, add_log_level

from storefront.utils.settings import LOG_FORMAT, LOG_LEVEL


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog and the root logger.

    Args:
        log_level: override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
        log_format: override LOG_FORMAT ("json" or "console")
    """
    level = log_level or LOG_LEVEL
    fmt = log_format or LOG_FORMAT
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if fmt == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    formatter = ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access", "celery"]:
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.addHandler(console_handler)
        logger.setLevel(numeric_level)

    structlog.get_logger(__name__).info("Logging configured", level=level, format=fmt)


def get_logger(name: str):
    return structlog.get_logger(name)
