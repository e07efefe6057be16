"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

SERVICE_NAME = "posture-api"

# Libraries that are chatty at INFO.
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx", "httpcore")


def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Route stdlib and structlog records through one structlog formatter.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: JSON lines for log shipping; otherwise a colored console
            renderer for local runs.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
    ]

    if json_output:
        final_processors = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final_processors],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(trace_id: str, **extra) -> None:
    """Bind per-request values (trace id, user id, ...) to the current async context."""
    structlog.contextvars.bind_contextvars(trace_id=trace_id, **{k: v for k, v in extra.items() if v})


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
