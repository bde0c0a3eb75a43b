#!/usr/bin/env python3
"""
Logging configuration for the registration sidecar

Development keeps the plain basicConfig format; production renders every
stdlib record as one JSON object per line through structlog.
"""

import logging
import os
from typing import Optional

import structlog

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering stdlib log records as JSON lines"""
    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
        ],
    )


def configure_logging(
    level: Optional[str] = None,
    environment: Optional[str] = None,
    log_file: Optional[str] = None,
):
    """
    Configure root logging

    Args:
        level: Log level name (default: LOG_LEVEL env or INFO)
        environment: 'production' switches to JSON lines (default: ENVIRONMENT env)
        log_file: Optional file to log to in addition to stderr (default: LOG_FILE env)
    """
    level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    environment = environment or os.environ.get("ENVIRONMENT", "development")
    log_file = log_file or os.environ.get("LOG_FILE")

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    if environment == "production":
        formatter = json_formatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
