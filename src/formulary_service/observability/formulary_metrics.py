"""Prometheus metrics for formulary index and workflow operations."""

from __future__ import annotations

from prometheus_client import Counter

from formulary_service.config import settings


FORMULARY_WRITES_TOTAL = Counter(
    "formulary_writes_total",
    "Index-maintaining writes by operation and outcome",
    ["operation", "outcome"],
)

FORMULARY_QUERIES_TOTAL = Counter(
    "formulary_queries_total",
    "Search and filter queries by query type",
    ["query"],
)

FORMULARY_BULK_IMPORT_ITEMS_TOTAL = Counter(
    "formulary_bulk_import_items_total",
    "Items processed by bulk imports",
    ["outcome"],
)

FORMULARY_PA_REQUESTS_SUBMITTED_TOTAL = Counter(
    "formulary_pa_requests_submitted_total",
    "Prior authorization requests submitted",
)


def _enabled() -> bool:
    """Check whether metrics are enabled."""
    return bool(settings.metrics_enabled)


def record_write(operation: str, outcome: str) -> None:
    """Record an upsert/update/remove outcome."""
    if not _enabled():
        return

    FORMULARY_WRITES_TOTAL.labels(operation=operation, outcome=outcome).inc()


def record_query(query: str) -> None:
    """Record a search or filter query."""
    if not _enabled():
        return

    FORMULARY_QUERIES_TOTAL.labels(query=query).inc()


def record_bulk_import(success: int, failed: int) -> None:
    """Record per-item bulk import outcomes."""
    if not _enabled():
        return

    if success:
        FORMULARY_BULK_IMPORT_ITEMS_TOTAL.labels(outcome="success").inc(success)
    if failed:
        FORMULARY_BULK_IMPORT_ITEMS_TOTAL.labels(outcome="failed").inc(failed)


def record_pa_request_submitted() -> None:
    """Record a prior authorization submission."""
    if not _enabled():
        return

    FORMULARY_PA_REQUESTS_SUBMITTED_TOTAL.inc()
