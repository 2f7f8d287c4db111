"""Prometheus metrics registration for feature gate evaluations.

Metric objects are defined at import time on the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter

curtain_evaluations_total = Counter(
    "curtain_evaluations_total",
    "Feature gate operations by outcome",
    ["operation", "result"],
)
curtain_store_errors_total = Counter(
    "curtain_store_errors_total",
    "Store failures converted to safe defaults",
    ["operation", "error_code"],
)


def record_evaluation(operation: str, result: str) -> None:
    curtain_evaluations_total.labels(operation=operation, result=result).inc()


def record_store_error(operation: str, error_code: str) -> None:
    curtain_store_errors_total.labels(operation=operation, error_code=error_code).inc()
