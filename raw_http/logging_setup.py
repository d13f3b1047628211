"""
Logging helpers for raw_http

Plain-text setup for local debugging and a JSON formatter for
log aggregation systems like ELK, Datadog, CloudWatch.
"""

import json
import logging
import sys
from typing import Any, Dict

LOGGER_NAME = "raw_http"

_EXTRA_FIELDS = ("method", "url", "status")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    Adapter records carry ``method``, ``url`` and ``status`` extras; those
    are lifted to top-level keys when present so exchanges can be filtered
    without parsing the message.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": int(record.created * 1000),  # milliseconds
            "name": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        payload.update(exchange_fields(record))

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def exchange_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the exchange extras set on a record, skipping unset ones."""
    return {
        field: getattr(record, field)
        for field in _EXTRA_FIELDS
        if getattr(record, field, None) is not None
    }


def setup_structured_logger(level: int = logging.INFO) -> logging.Logger:
    """
    Configure structured JSON logging for the adapter.

    Args:
        level: Logging level (default: logging.INFO)

    Returns:
        The configured ``raw_http`` logger

    Example:
        >>> from raw_http.logging_setup import setup_structured_logger
        >>> setup_structured_logger(logging.DEBUG)
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False
    return logger


def setup_logging(debug: bool = False) -> None:
    """
    Setup plain-text logging

    Args:
        debug: Enable debug level logging
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(LOGGER_NAME).setLevel(level)
