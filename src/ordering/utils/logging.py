"""Logging configuration for the Ordering service.

stdlib logging owns the handlers; structlog renders on top of it. Three
rotating files are written under ``LOG_DIR``:

- ``ordering.log``: everything at the configured level
- ``ordering_error.log``: errors only (failed compensations, gateway give-ups)
- ``payments.log``: the payment loggers, kept for settlement audits

Payment credentials and signatures never reach a log line; see
``redact_secrets``.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

SERVICE_NAME = "ordering"

LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

# Keys whose values are replaced before rendering
SENSITIVE_KEYS = frozenset({"md5sig", "signature", "hash", "merchant_secret", "secret"})

PAYMENT_LOGGERS = ("ordering.payments", "ordering.gateway")

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise derived from the environment name."""
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENV.get(_environment(), "INFO")).upper()


def redact_secrets(_logger, _method_name, event_dict):
    """structlog processor masking payment secrets and signatures."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def _rotating(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | None = None) -> None:
    level = get_log_level()
    log_path = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    log_path.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating(log_path / f"{SERVICE_NAME}.log", level),
        _rotating(log_path / f"{SERVICE_NAME}_error.log", logging.ERROR),
    ]

    audit = _rotating(log_path / "payments.log", logging.INFO)
    for name in PAYMENT_LOGGERS:
        logging.getLogger(name).addHandler(audit)

    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def setup_structlog() -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if _environment() in ("production", "staging"):
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | None = None) -> None:
    """Configure all logging for the service. Call once at startup."""
    setup_stdlib_logging(log_dir)
    setup_structlog()
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)


def add_context(**kwargs: Any) -> None:
    """Bind variables included in every subsequent log line of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop request-scoped variables, keeping the service name."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)
