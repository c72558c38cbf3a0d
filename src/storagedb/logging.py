"""
Structured logging for storagedb.

Every module obtains its logger through :func:`get_logger` and logs
event-style keys (``schema.seeded``, ``storage.transaction_rolled_back``)
with key/value context instead of formatted strings. Output goes through
the stdlib ``logging`` tree on stderr, so stdout stays free for command
results.

Examples:
    >>> from storagedb.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.info("schema.seeded", table="users", count=2)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from storagedb.errors import InvalidConfigError


def _level(name: str) -> int:
    levels = logging.getLevelNamesMapping()
    try:
        return levels[name.upper()]
    except KeyError:
        raise InvalidConfigError("log_level", name, f"Unknown log level {name!r}") from None


def _service_tag(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        return event_dict

    return add_service


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "storagedb",
    cache_loggers: bool = True,
) -> None:
    """Configure structlog and the stdlib handler behind it.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        json_format: JSON lines when true, plain console lines when false.
            ``None`` picks JSON unless stderr is a terminal.
        service: Value of the ``service`` key on every event.
        cache_loggers: Freeze each logger on first use. Loggers frozen this
            way ignore any later ``structlog.configure`` call.

    Raises:
        InvalidConfigError: If ``level`` is not a logging level name.
    """
    threshold = _level(level)
    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_tag(service),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=cache_loggers,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=threshold)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Add ``kwargs`` to every event logged from this context on."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind context for one ``with`` block.

    Keys that were already bound get their earlier values back on exit.

    Example:
        with LogContext(schema_file="schema.yaml"):
            logger.info("schema.loaded")
    """

    def __init__(self, **kwargs: Any):
        self._bound = structlog.contextvars.bound_contextvars(**kwargs)

    def __enter__(self) -> LogContext:
        self._bound.__enter__()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._bound.__exit__(*exc_info)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
