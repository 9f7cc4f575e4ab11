"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter, Gauge


compression_total = Counter(
    "image_compression_total",
    "Total number of finished compression calls by outcome.",
    ["outcome"],
)

compression_attempts_total = Counter(
    "image_compression_attempts_total",
    "Total number of encode attempts across all quality levels.",
)

compressions_in_progress = Gauge(
    "image_compressions_in_progress",
    "Number of compression calls currently running.",
)
