"""
Logging setup for the resolver service.

structlog renders both its own loggers (HTTP middleware) and the stdlib
records emitted by the resolver core. Every line carries the service name,
package version and IGS version so output from several resolver
deployments can be told apart downstream.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional, TextIO

import structlog

from . import __version__
from .config import settings
from .core.intent import IGS_VERSION

SERVICE_NAME = "intenus-resolver"

LOG_FORMATS = ("auto", "json", "console")

# Third-party loggers that only matter when something is wrong
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def add_service_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    event_dict.setdefault("igs_version", IGS_VERSION)
    return event_dict


def resolve_log_format(log_format: str, level: int) -> str:
    """Map "auto" to console output at DEBUG and JSON lines otherwise."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format {log_format!r}; expected one of {', '.join(LOG_FORMATS)}")
    if log_format == "auto":
        return "console" if level <= logging.DEBUG else "json"
    return log_format


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Override log level (default: settings.log_level)
        log_format: "auto", "json" or "console" (default: settings.log_format)
        stream: Output stream (default: stdout)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    output = resolve_log_format(log_format or settings.log_format, level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if output == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer(sort_keys=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Core modules log through stdlib; the pre-chain gives their records
    # the same level, logger name, service context and timestamp
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
