"""Structured logging setup shared by the CLI, library code and tests."""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor


_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(json_logs: bool = False, log_level_name: str = "INFO") -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Args:
        json_logs: Render log lines as JSON instead of the console format
        log_level_name: Logging level name (DEBUG, INFO, WARNING, ...)
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    shared = _shared_processors()

    renderer: Processor
    if json_logs:
        shared.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Get a structlog logger, optionally pre-bound with context values."""
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger
