"""Prometheus metrics."""

from .prometheus_exporter import compression_attempts_total, compression_total, compressions_in_progress

__all__ = ["compression_attempts_total", "compression_total", "compressions_in_progress"]
