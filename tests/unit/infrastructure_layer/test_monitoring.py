"""
Unit Tests for Prometheus metrics collection
"""

import pytest

from llm_nexus.infrastructure.monitoring import MetricsCollector, get_metrics_collector


@pytest.mark.unit
class TestMetricsCollector:
    def test_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_exposition_contains_gateway_metrics(self):
        metrics = get_metrics_collector()
        metrics.record_request("success", provider="openai")
        metrics.record_request_duration("openai", 0.25)
        metrics.record_cache_hit()
        metrics.record_cache_miss()
        metrics.record_cache_error("get")
        metrics.record_error("bad_request", "request_validation")
        metrics.record_provider_request("openai", "success")
        metrics.record_provider_latency("openai", 0.2)
        metrics.record_background_task("cache_write", "succeeded")
        metrics.set_background_queue_depth(3)

        output = metrics.get_prometheus_metrics().decode()

        for name in (
            "nexus_requests_total",
            "nexus_request_duration_seconds",
            "nexus_cache_hits_total",
            "nexus_cache_misses_total",
            "nexus_cache_errors_total",
            "nexus_errors_total",
            "nexus_provider_requests_total",
            "nexus_provider_latency_seconds",
            "nexus_background_tasks_total",
            "nexus_background_queue_depth",
        ):
            assert name in output

    def test_content_type(self):
        assert get_metrics_collector().get_content_type().startswith("text/plain")

    def test_new_collectors_share_registry(self):
        MetricsCollector().record_cache_hit()
        assert b"nexus_cache_hits_total" in get_metrics_collector().get_prometheus_metrics()
