from __future__ import annotations

import logging
import sys

import structlog

IDENTITY_CONTEXT_KEYS = ("contact_id", "primary_contact_id")


def _coerce_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def _format_uvicorn_access(level: int) -> None:
    # uvicorn installs its access handlers before app startup; give them timestamps
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    access_logger = logging.getLogger("uvicorn.access")
    if not access_logger.handlers:
        access_logger.addHandler(logging.StreamHandler(sys.stdout))
    for handler in access_logger.handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    access_logger.setLevel(level)


def setup_logging(level: str | int = "INFO", service_name: str | None = None) -> None:
    """Configure JSON logging for the identity service.

    Every record carries ``service`` when a name is given, plus whatever
    contact identifiers are bound through :func:`bind_contact_context`.
    """

    logging_level = _coerce_level(level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=logging_level)
    _format_uvicorn_access(logging_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)


def bind_contact_context(contact_id: int | None = None, primary_contact_id: int | None = None) -> None:
    """Attach the contact being resolved to every log line on this context."""

    structlog.contextvars.bind_contextvars(contact_id=contact_id, primary_contact_id=primary_contact_id)


def clear_contact_context() -> None:
    structlog.contextvars.unbind_contextvars(*IDENTITY_CONTEXT_KEYS)


def get_logger(name: str):
    return structlog.get_logger(name)


__all__ = ["bind_contact_context", "clear_contact_context", "get_logger", "setup_logging"]
