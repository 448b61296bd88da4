"""Adapters for external systems: Redis cache, SQL store, Prometheus metrics."""
