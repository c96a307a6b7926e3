"""
Structured logging setup for the storage adapter.

structlog renders the adapter's events; the AWS SDK keeps logging through
the standard library and is held at WARNING unless debugging.
"""

import logging

import structlog

SDK_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(
    level: str = "INFO",
    format_json: bool = True,
    include_timestamp: bool = True,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Level name such as ``DEBUG`` or ``warning``
        format_json: Render events as JSON lines instead of console output
        include_timestamp: Add an ISO timestamp to every event

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric_level = _resolve_level(level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(structlog.processors.JSONRenderer() if format_json else structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=numeric_level)

    sdk_level = numeric_level if numeric_level <= logging.DEBUG else max(numeric_level, logging.WARNING)
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
