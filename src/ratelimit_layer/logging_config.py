"""Structured logging for the retry layer using structlog.

``configure_logging`` installs JSON output for production and console
output for development, and routes stdlib loggers (httpx, httpcore)
through the same renderer.

Events emitted while a retry chain runs carry a ``retry_chain_id`` and the
request method/URL, bound through ``structlog.contextvars`` by
``retry_chain_context``. Every event logged for one call, transport events
included, can be grouped by that id.
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from ratelimit_layer import __version__

# Event keys whose values must never reach the log output
SENSITIVE_KEYS = frozenset({"authorization", "api_token", "token"})
REDACTED = "[REDACTED]"

# Loggers of the transport stack that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def app_context_processor(app_name: str, app_version: str = __version__) -> Processor:
    """Build a processor adding the application name and version to each event."""

    def add_app_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("app_version", app_version)
        return event_dict

    return add_app_context


def redact_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask API credentials logged under a sensitive key."""
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


@contextmanager
def retry_chain_context(method: str, url: str, chain_id: Optional[str] = None) -> Iterator[str]:
    """Bind retry chain context for the duration of one executor call.

    Usage:
        with retry_chain_context("GET", "https://api/users") as chain_id:
            ...  # every log event here carries retry_chain_id=chain_id

    Nested chains restore the outer binding on exit.
    """
    chain_id = chain_id or uuid.uuid4().hex[:16]
    with structlog.contextvars.bound_contextvars(
        retry_chain_id=chain_id,
        http_method=method,
        http_url=url,
    ):
        yield chain_id


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    app_name: str = "ratelimit-layer",
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        environment: "production" selects the JSON renderer, anything else
            the console renderer
        app_name: Value of the ``app`` key added to every event
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context_processor(app_name),
        redact_credentials,
    ]

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, log_level_int))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=logging.getLevelName(log_level_int),
        environment=environment,
        renderer="json" if is_production else "console",
    )


def configure_logging_from_settings(settings) -> None:
    """Apply ``LOG_LEVEL``, ``ENVIRONMENT`` and ``APP_NAME`` from Settings."""
    configure_logging(
        log_level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        app_name=settings.APP_NAME,
    )
