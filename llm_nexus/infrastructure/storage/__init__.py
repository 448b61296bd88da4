from llm_nexus.infrastructure.storage.sql_usage_store import SqlUsageStore

__all__ = ["SqlUsageStore"]
