"""Structured logging for load test runs using structlog.

Runs collected by a CI job or a pod log pipeline log JSON lines; runs
watched from a terminal log colored console output. Every line of a run
carries a ``run_id`` so that the output of parallel generators can be told
apart.
"""

import logging
import sys
import uuid
from typing import Literal

import structlog
from structlog.types import Processor

# Third party loggers that are too chatty at INFO during a load test
_QUIET_LOGGERS = ("urllib3", "urllib3.connectionpool")


def configure_logging(
    level: str = "INFO",
    format: Literal["json", "console"] = "json",
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        format: 'json' for collected runs, 'console' for terminals.
    """
    numeric_level = getattr(logging, level.upper())
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]

    if format == "json":
        renderers: list[Processor] = [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=[*shared_processors, *renderers],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Locust reports its own progress through the standard library
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_run_context(run_id: str | None = None, **fields: object) -> str:
    """Attach run-wide fields to every subsequent log line.

    Args:
        run_id: Identifier of the run; a random one when omitted.
        **fields: Extra fields such as the tenant.

    Returns:
        The bound run id.
    """
    run_id = run_id or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(run_id=run_id, **fields)
    return run_id


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name (typically __name__).

    Returns:
        Configured structlog logger instance.
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
