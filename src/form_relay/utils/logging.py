"""
Logging setup shared by the HTTP server, Lambda entry point and CLI.
"""

import sys

from loguru import logger


def setup_logging(
    service_name: str = "form-relay",
    log_level: str = "INFO",
    log_format: str | None = None,
    enable_json: bool = False,
):
    """
    Set up standardized logging.

    Args:
        service_name: Name shown in every log line
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Custom log format string
        enable_json: Emit serialized JSON records (for CloudWatch and similar sinks)
    """

    # Remove default logger
    logger.remove()

    if log_format is None:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
            f"{service_name}:<cyan>{{function}}</cyan>:<cyan>{{line}}</cyan> - <level>{{message}}</level>"
        )

    logger.add(
        sys.stdout,
        format=log_format,
        level=log_level.upper(),
        colorize=not enable_json,
        serialize=enable_json,
        backtrace=True,
        diagnose=False,
    )

    logger.info("✅ Logging configured for {} at level: {}", service_name, log_level)


def get_logger(name: str):
    """Get a logger instance for a specific component."""
    return logger.bind(component=name)
