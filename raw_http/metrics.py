"""
Prometheus Metrics for raw_http

Provides counters and histograms for exchange monitoring.
Host application should expose the prometheus_client registry.
"""

import logging
from typing import Union

from prometheus_client import Counter, Histogram

logger = logging.getLogger("raw_http.metrics")

# Total exchanges counter with method and status code labels
REQUEST_COUNT = Counter(
    "raw_http_requests_total",
    "Total number of HTTP exchanges",
    ["method", "code"],
)

REQUEST_LATENCY = Histogram(
    "raw_http_request_latency_seconds",
    "HTTP exchange latency in seconds",
    ["method"],
)


def record_request(method: str, code: Union[int, str], latency: float) -> None:
    """
    Record metrics for an exchange.

    Args:
        method: HTTP method
        code: HTTP status code, or "error" when no response was received
        latency: Exchange duration in seconds
    """
    try:
        REQUEST_COUNT.labels(method=method.upper(), code=str(code)).inc()
        REQUEST_LATENCY.labels(method=method.upper()).observe(latency)
    except Exception as e:
        # Metrics failures should not break the exchange
        logger.debug("Failed to record metrics: %s", e)
