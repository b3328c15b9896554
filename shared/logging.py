"""
Structured logging for the feature permissions engine.

Events are rendered as JSON. The principal and tenancy being evaluated are
held in context variables so every event emitted while answering a
permission question carries them.
"""

import sys
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

import structlog

from shared.config import get_config
from shared.errors import ConfigurationError

principal_id_var: ContextVar[Optional[str]] = ContextVar("principal_id", default=None)
tenancy_var: ContextVar[Optional[str]] = ContextVar("tenancy_context", default=None)


def configure_logging(service_name: str, log_level: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger.

    ``log_level`` defaults to ``PERMISSIONS_LOG_LEVEL``.
    """
    if log_level is None:
        log_level = get_config().log_level

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {log_level}", {"log_level": log_level})

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_area,
            add_principal_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    get_logger(f"{service_name}.logging").debug("Logging configured", log_level=log_level)


def add_area(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Split ``permissions.<area>`` logger names into service and area fields."""
    logger_name = event_dict.get("logger", "")
    service, _, area = logger_name.partition(".")
    if area:
        event_dict["service"] = service
        event_dict["area"] = area
    return event_dict


def add_principal_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the principal and tenancy under evaluation, unless the event sets its own."""
    principal_id = principal_id_var.get()
    if principal_id:
        event_dict.setdefault("principal_id", principal_id)

    tenancy = tenancy_var.get()
    if tenancy:
        event_dict.setdefault("tenancy_context", tenancy)

    return event_dict


def set_principal_context(principal_id: Optional[str] = None, tenancy_context: Optional[str] = None):
    if principal_id:
        principal_id_var.set(principal_id)
    if tenancy_context:
        tenancy_var.set(tenancy_context)


def clear_context():
    principal_id_var.set(None)
    tenancy_var.set(None)


@contextmanager
def principal_context(principal_id: Optional[str], tenancy_context: Optional[str] = None) -> Iterator[None]:
    """Bind a principal and tenancy for the duration of a block."""
    principal_token = principal_id_var.set(principal_id)
    tenancy_token = tenancy_var.set(tenancy_context)
    try:
        yield
    finally:
        tenancy_var.reset(tenancy_token)
        principal_id_var.reset(principal_token)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
