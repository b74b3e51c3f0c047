"""Logging configuration for the storage manager.

Two output formats, selected by LoggingConfig.format:
- text: one line per record, the structured event appended in brackets
- json: python-json-logger records with service and tenant fields

Records carry their structured fields in ``extra``:
    logger.warning("...", extra={"event": LogEvent.SPACE_EXISTS, "organization": "acme"})
"""

import logging
import sys
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import json as jsonlogger

from storagemanager.config import LoggingConfig

# Structured fields identifying the tenant a record is about
TENANT_FIELDS = ("organization", "space")


class RateLimitFilter(logging.Filter):
    """Drop repeats of the same non-error record within a time window.

    Records are considered equal when they share logger, event, tenant and
    rendered message. A container retry loop logs the same warning on every
    attempt; only the first one per window reaches the handler.
    """

    def __init__(self, window_seconds: float = 5.0, max_keys: int = 1000) -> None:
        super().__init__()
        self._window = window_seconds
        self._max_keys = max_keys
        self._seen: OrderedDict[tuple[str, ...], float] = OrderedDict()

    @staticmethod
    def _key(record: logging.LogRecord) -> tuple[str, ...]:
        tenant = tuple(str(getattr(record, field, "")) for field in TENANT_FIELDS)
        return (record.name, str(getattr(record, "event", "")), *tenant, record.getMessage())

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR or self._window <= 0:
            return True

        key = self._key(record)
        now = time.monotonic()
        last = self._seen.get(key)
        if last is not None and now - last < self._window:
            return False

        self._seen[key] = now
        self._seen.move_to_end(key)
        while len(self._seen) > self._max_keys:
            self._seen.popitem(last=False)
        return True


class EventTextFormatter(logging.Formatter):
    """Human-readable format with the structured event and tenant appended."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        event = getattr(record, "event", None)
        if event is None:
            return line
        tenant = "/".join(
            str(getattr(record, field)) for field in TENANT_FIELDS if getattr(record, field, None)
        )
        return f"{line} [{event}{' ' + tenant if tenant else ''}]"


class ManagerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter for log aggregation.

    Every record gets timestamp, level, logger, service and pid. The event
    is emitted as its plain string value.
    """

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self._service
        log_record["pid"] = record.process

        if "event" in log_record:
            log_record["event"] = str(log_record["event"])
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        log_record.pop("color_message", None)


def setup_logging(config: LoggingConfig) -> None:
    """Install one stdout handler on the root and uvicorn loggers."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.format == "json":
        formatter = ManagerJsonFormatter(config)
    else:
        formatter = EventTextFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RateLimitFilter(window_seconds=config.rate_limit_seconds))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in ("uvicorn", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = False
        uv_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").disabled = True

    # SDK request tracing
    for name in ("aiobotocore", "botocore", "azure", "azure.identity"):
        logging.getLogger(name).setLevel(logging.WARNING)
