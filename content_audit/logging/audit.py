"""Structured JSON audit logging for content security analysis.

Every line is one JSON object on the content_audit.audit logger: stdout
always, plus AUDIT_LOG_FILE when set. Lines written while a batch step
runs carry that batch's id, so one run's per-entity outcomes (analyzed,
cached, failed) can be pulled out of a shared log with a single filter.
Entity-scoped events put entity_type and entity_id at the top level of
the object.
"""

import json
import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from contextvars import ContextVar

from content_audit.config.settings import get_settings

LOGGER_NAME = "content_audit.audit"

# Id of the batch whose step is running; empty outside batches
batch_id_var: ContextVar[str] = ContextVar("batch_id", default="")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "batch_id": batch_id_var.get(""),
        }
        # Merge any extra fields passed via `extra={}` kwarg
        if hasattr(record, "audit_data"):
            log_entry.update(record.audit_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the audit logger with JSON output."""
    settings = get_settings()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.audit_log_file:
        file_handler = logging.FileHandler(settings.audit_log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger (avoids duplicate output)
    logger.propagate = False


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def generate_batch_id() -> str:
    return uuid.uuid4().hex[:12]


class Timer:
    """Context manager to measure call latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)


@contextmanager
def batch_scope(batch_id: str) -> Iterator[str]:
    """Tag every log line written inside the block with `batch_id`."""
    token = batch_id_var.set(batch_id)
    try:
        yield batch_id
    finally:
        batch_id_var.reset(token)


def entity_fields(entity_type: str, entity_id, **extra) -> dict:
    """audit_data for an entity-scoped event. Ids are always strings."""
    return {"entity_type": entity_type, "entity_id": str(entity_id), **extra}
