"""Structured logging configuration."""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from garage_parts.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level)

    if settings.log_format == "json":
        handler = logging.StreamHandler(sys.stdout)
        formatter = jsonlogger.JsonFormatter(
            fmt="%(timestamp)s %(level)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
        handler.setFormatter(formatter)
    else:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class ServiceLogger:
    """Logger bound to one service component."""

    def __init__(self, component: str):
        self.component = component
        self.logger = get_logger(component)

    def log_operation(
        self,
        action: str,
        duration_ms: float | None = None,
        **kwargs: Any,
    ) -> None:
        """Log a completed service operation with structured data."""
        log_data: dict[str, Any] = {
            "component": self.component,
            "action": action,
        }

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms

        log_data.update(kwargs)
        self.logger.info("service_operation", **log_data)

    def log_transition(
        self,
        order_id: str,
        from_status: str | None,
        to_status: str,
        **kwargs: Any,
    ) -> None:
        """Log a purchase order status change."""
        self.logger.info(
            "order_transition",
            component=self.component,
            order_id=order_id,
            from_status=from_status,
            to_status=to_status,
            **kwargs,
        )

    def log_notification(
        self,
        notification_type: str,
        notification_id: str,
        **kwargs: Any,
    ) -> None:
        """Log an emitted notification."""
        self.logger.info(
            "notification_emitted",
            component=self.component,
            notification_type=notification_type,
            notification_id=notification_id,
            **kwargs,
        )

    def log_error(
        self,
        error: str,
        **kwargs: Any,
    ) -> None:
        """Log an error."""
        self.logger.error(
            "service_error",
            component=self.component,
            error=error,
            **kwargs,
        )
