"""Structured JSON logging for the billing service."""
from __future__ import annotations

import logging
from typing import Any

import structlog


def _service_context(app_name: str | None, environment: str | None):
    def add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        if app_name:
            event_dict.setdefault("service", app_name)
        if environment:
            event_dict.setdefault("environment", environment)
        return event_dict

    return add_service


def setup_logging(
    level: int = logging.INFO,
    *,
    app_name: str | None = None,
    environment: str | None = None,
) -> None:
    """Route structlog events to stdout as JSON, tagged with the service and environment."""
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _service_context(app_name, environment),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["setup_logging", "get_logger"]
