"""
Structured logging for reservation saga runs.

Every record emitted while a saga is running carries its id, name and current
stage, taken from the ``saga_context`` context variable, so concurrent runs
can be told apart in a shared log stream.
"""

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from stocksaga.types import SagaStatus

LOGGER_NAME = "stocksaga.saga"

saga_context: ContextVar[dict[str, Any]] = ContextVar("saga_context", default={})

_FINISH_LEVELS = {
    SagaStatus.COMMITTED: logging.INFO,
    SagaStatus.PARTIALLY_FAILED: logging.ERROR,
}

_PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(saga_id)s:%(stage)s] %(message)s"


class SagaJsonFormatter(logging.Formatter):
    """One JSON object per record: base fields, saga context, then known extras."""

    extra_fields = (
        "saga_id",
        "saga_name",
        "stage",
        "status",
        "operation",
        "item_id",
        "total_lines",
        "duration_ms",
        "error_type",
        "error_message",
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        context = saga_context.get()
        for key in ("saga_id", "saga_name", "stage"):
            if context.get(key) is not None:
                entry[key] = context[key]

        entry.update(
            {name: getattr(record, name) for name in self.extra_fields if hasattr(record, name)}
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class SagaContextFilter(logging.Filter):
    """Stamps saga_id, saga_name and stage onto records so plain formats can use them."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = saga_context.get()
        record.saga_id = context.get("saga_id") or "unknown"
        record.saga_name = context.get("saga_name") or "unknown"
        record.stage = context.get("stage") or ""
        return True


class SagaLogger:
    """Lifecycle events of a reservation saga."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        if not any(isinstance(f, SagaContextFilter) for f in self.logger.filters):
            self.logger.addFilter(SagaContextFilter())

    def set_saga_context(self, saga_id: str, saga_name: str, stage: str | None = None) -> None:
        saga_context.set({"saga_id": saga_id, "saga_name": saga_name, "stage": stage})

    def clear_saga_context(self) -> None:
        saga_context.set({})

    def saga_started(self, saga_id: str, saga_name: str, total_lines: int) -> None:
        self.set_saga_context(saga_id, saga_name, SagaStatus.INIT.value)
        self.logger.info(
            "Saga started: %s (%d line(s))",
            saga_name,
            total_lines,
            extra={"saga_name": saga_name, "total_lines": total_lines},
        )

    def stage_entered(self, saga_id: str, saga_name: str, status: SagaStatus) -> None:
        self.set_saga_context(saga_id, saga_name, status.value)
        self.logger.debug("Saga %s entered %s", saga_id, status.value)

    def check_failed(self, saga_id: str, item_id: str, reason: str) -> None:
        self.logger.info(
            "Check failed for %s: %s",
            item_id,
            reason,
            extra={"operation": "check", "item_id": item_id},
        )

    def operation_failed(self, saga_id: str, operation: str, key: str, error: Exception) -> None:
        self.logger.error(
            "%s failed for %s - %s",
            operation,
            key,
            error,
            extra={
                "operation": operation,
                "item_id": key,
                "error_type": type(error).__name__,
                "error_message": str(error),
            },
        )

    def saga_finished(
        self, saga_id: str, saga_name: str, status: SagaStatus, duration_ms: float
    ) -> None:
        """Log the terminal status, then drop the saga context."""
        try:
            self.logger.log(
                _FINISH_LEVELS.get(status, logging.WARNING),
                "Saga finished: %s - Status: %s",
                saga_name,
                status.value,
                extra={"status": status.value, "duration_ms": duration_ms},
            )
        finally:
            self.clear_saga_context()


def setup_saga_logging(
    log_level: str = "INFO", json_format: bool = True, include_console: bool = True
) -> SagaLogger:
    """
    Replace the handlers of the ``stocksaga.saga`` logger.

    Args:
        log_level: Level name such as DEBUG or WARNING
        json_format: Emit ``SagaJsonFormatter`` output instead of a plain line
        include_console: Attach a stderr handler
    """
    target = logging.getLogger(LOGGER_NAME)
    target.setLevel(logging.getLevelName(log_level.upper()))
    target.handlers.clear()

    if include_console:
        handler = logging.StreamHandler()
        handler.setFormatter(SagaJsonFormatter() if json_format else logging.Formatter(_PLAIN_FORMAT))
        handler.addFilter(SagaContextFilter())
        target.addHandler(handler)

    return SagaLogger(LOGGER_NAME)


saga_logger = SagaLogger(LOGGER_NAME)
