#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

This module provides the gateway's metrics:
- Generation requests by outcome and provider
- Cache hit/miss counts, and cache errors by operation
- Backend latency histograms
- Detached task outcomes and queue depth

Architectural Decision: prometheus-client for industry-standard metrics
- Compatible with Grafana dashboards
- Histogram buckets for latency percentiles
- Cache errors counted apart from misses, so "cache down" is visible
  even though the orchestrator treats both the same way

Author: System Architect
Date: 2026-09-14
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

from llm_nexus.core.config.settings import get_settings
from llm_nexus.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

REQUEST_COUNT = Counter(
    'nexus_requests_total',
    'Total generation requests by outcome',
    ['status', 'provider']
)

REQUEST_DURATION = Histogram(
    'nexus_request_duration_seconds',
    'End-to-end orchestration duration',
    ['provider'],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
)

CACHE_HITS = Counter(
    'nexus_cache_hits_total',
    'Total response cache hits'
)

CACHE_MISSES = Counter(
    'nexus_cache_misses_total',
    'Total response cache misses'
)

CACHE_ERRORS = Counter(
    'nexus_cache_errors_total',
    'Cache operations that failed (treated as miss / dropped write)',
    ['operation']  # get, set
)

ERRORS = Counter(
    'nexus_errors_total',
    'Total errors by type',
    ['error_type', 'stage']
)

PROVIDER_REQUESTS = Counter(
    'nexus_provider_requests_total',
    'Total calls to LLM backends',
    ['provider', 'status']  # success, failure, timeout
)

PROVIDER_LATENCY = Histogram(
    'nexus_provider_latency_seconds',
    'Backend response latency',
    ['provider'],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0)
)

BACKGROUND_TASKS = Counter(
    'nexus_background_tasks_total',
    'Detached tasks by kind and outcome',
    ['kind', 'status']  # succeeded, failed, dropped
)

BACKGROUND_QUEUE_DEPTH = Gauge(
    'nexus_background_queue_depth',
    'Detached tasks waiting for a worker'
)

APP_INFO = Info(
    'nexus_app',
    'Application information'
)


class MetricsCollector:
    """
    Centralized metrics collector.

    Usage:
        metrics = get_metrics_collector()
        metrics.record_request("success", "openai")
        metrics.record_cache_error("get")
        output = metrics.get_prometheus_metrics()
    """

    def __init__(self):
        self.settings = get_settings()

        APP_INFO.info({
            'version': self.settings.app.APP_VERSION,
            'environment': self.settings.app.ENVIRONMENT,
            'app_name': self.settings.app.APP_NAME
        })

        logger.info("Metrics collector initialized", stage="M.0")

    # =========================================================================
    # Request Metrics
    # =========================================================================

    def record_request(self, status: str, provider: str = "unknown") -> None:
        """Record a generation request outcome."""
        REQUEST_COUNT.labels(status=status, provider=provider).inc()

    def record_request_duration(self, provider: str, duration_seconds: float) -> None:
        REQUEST_DURATION.labels(provider=provider).observe(duration_seconds)

    # =========================================================================
    # Cache Metrics
    # =========================================================================

    def record_cache_hit(self) -> None:
        CACHE_HITS.inc()

    def record_cache_miss(self) -> None:
        CACHE_MISSES.inc()

    def record_cache_error(self, operation: str) -> None:
        """Record a failed cache operation ("get" or "set")."""
        CACHE_ERRORS.labels(operation=operation).inc()

    # =========================================================================
    # Error Metrics
    # =========================================================================

    def record_error(self, error_type: str, stage: str) -> None:
        ERRORS.labels(error_type=error_type, stage=stage).inc()

    # =========================================================================
    # Provider Metrics
    # =========================================================================

    def record_provider_request(self, provider: str, status: str) -> None:
        PROVIDER_REQUESTS.labels(provider=provider, status=status).inc()

    def record_provider_latency(self, provider: str, duration_seconds: float) -> None:
        PROVIDER_LATENCY.labels(provider=provider).observe(duration_seconds)

    # =========================================================================
    # Background Task Metrics
    # =========================================================================

    def record_background_task(self, kind: str, status: str) -> None:
        """Record a detached task outcome (succeeded, failed or dropped)."""
        BACKGROUND_TASKS.labels(kind=kind, status=status).inc()

    def set_background_queue_depth(self, depth: int) -> None:
        BACKGROUND_QUEUE_DEPTH.set(depth)

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


# Global metrics collector
_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
