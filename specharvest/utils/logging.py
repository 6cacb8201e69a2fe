"""structlog setup for harvest runs.

One processor chain feeds two renderers: a console renderer for runs
started by hand and a JSON renderer for scheduled runs, picked by
``APP_ENV=production`` or ``specharvest run --json-logs``.  Standard-library
loggers (httpx, aiosqlite) are routed through the same chain.

Every line logged inside :func:`run_context` carries the run id, so the
lines of one scheduled run can be grouped in a shared log stream.
"""

import logging
import os
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator

import structlog

# Libraries that log every request or statement at INFO.  The engine
# already logs each fetch and each ledger flush itself.
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_output: bool) -> structlog.types.Processor:
    if json_output or os.environ.get("APP_ENV", "development") == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON lines regardless of ``APP_ENV``.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    processors = _shared_processors()
    renderer = _select_renderer(json_output)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound to *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """Bind ``run_id`` to every log line emitted inside the block.

    Yields the run id in use, generating one when *run_id* is omitted.
    """
    current = run_id or new_run_id()
    with structlog.contextvars.bound_contextvars(run_id=current):
        yield current
