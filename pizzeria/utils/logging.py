"""Structured logging configuration."""

import logging
import sys
from typing import Any
from uuid import UUID

import structlog
from pythonjsonlogger import jsonlogger

from pizzeria.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        formatter = jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # uvicorn access lines duplicate our request events
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

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


class OrderLogger:
    """Logger bound to the order lifecycle events."""

    def __init__(self, component: str):
        self.component = component
        self.logger = get_logger(component)

    def log_placed(
        self,
        order_id: UUID,
        user_id: UUID,
        total_price: Any,
        **kwargs: Any,
    ) -> None:
        """Log a newly placed order."""
        self.logger.info(
            "order_placed",
            component=self.component,
            order_id=str(order_id),
            user_id=str(user_id),
            total_price=str(total_price),
            **kwargs,
        )

    def log_transition(
        self,
        order_id: UUID,
        from_status: str,
        to_status: str,
        actor: UUID | None,
        forced: bool = False,
        **kwargs: Any,
    ) -> None:
        """Log a status change; forced changes are logged as warnings."""
        log = self.logger.warning if forced else self.logger.info
        log(
            "forced_status_transition" if forced else "order_status_changed",
            component=self.component,
            order_id=str(order_id),
            from_status=from_status,
            to_status=to_status,
            actor=str(actor) if actor else None,
            **kwargs,
        )

    def log_rejected(self, order_id: UUID | None, reason: str, **kwargs: Any) -> None:
        """Log a business rule rejection."""
        self.logger.info(
            "order_rejected",
            component=self.component,
            order_id=str(order_id) if order_id else None,
            reason=reason,
            **kwargs,
        )
