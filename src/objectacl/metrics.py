"""Prometheus metrics definitions for objectacl.

All metrics use the ``objectacl_`` prefix. Collectors are only created and
registered by ``init_metrics()``; until then the module-level references stay
``None`` and ``record_request()`` does nothing.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Request counter  (labels: operation, status)
# ---------------------------------------------------------------------------
requests_total: Counter | None = None

# ---------------------------------------------------------------------------
# Byte counter
# ---------------------------------------------------------------------------
request_bytes_total: Counter | None = None


def init_metrics(registry: CollectorRegistry | None = None) -> None:
    """Create and register all Prometheus metrics.

    Call once at startup when metrics are enabled. Passing a registry keeps
    the collectors out of the global default registry.
    """
    global _initialized
    global requests_total, request_bytes_total

    if _initialized:
        return

    kwargs = {"registry": registry} if registry is not None else {}

    requests_total = Counter(
        "objectacl_requests_total",
        "Total ACL requests by operation and outcome",
        ["operation", "status"],
        **kwargs,
    )

    request_bytes_total = Counter(
        "objectacl_request_bytes_total",
        "Total bytes sent in ACL request bodies",
        **kwargs,
    )

    _initialized = True


def record_request(operation: str, status: str, body_bytes: int = 0) -> None:
    """Count one request outcome; a no-op when metrics are not initialised."""
    if requests_total is not None:
        requests_total.labels(operation=operation, status=status).inc()
    if request_bytes_total is not None and body_bytes:
        request_bytes_total.inc(body_bytes)
