"""
Unit Tests for the in-memory usage log store
"""

import pytest

from llm_nexus.core.exceptions import UserNotFoundError
from llm_nexus.core.interfaces import InMemoryUsageStore, UsageLogStore
from llm_nexus.llm_gateway.models import UsageLogRecord


@pytest.mark.unit
class TestInMemoryUsageStore:
    async def test_create_and_get_user(self, usage_store):
        created = await usage_store.create_user("alice")
        fetched = await usage_store.get_user(created.id)

        assert fetched == created
        assert fetched.name == "alice"
        assert len(created.id) == 36

    async def test_ids_are_unique(self, usage_store):
        a = await usage_store.create_user("alice")
        b = await usage_store.create_user("alice")
        assert a.id != b.id

    async def test_unknown_user(self, usage_store):
        with pytest.raises(UserNotFoundError) as exc_info:
            await usage_store.get_user("missing")
        assert exc_info.value.details["user_id"] == "missing"

    async def test_append_keeps_order(self, usage_store):
        for provider in ("openai", "gemini"):
            await usage_store.append(UsageLogRecord(prompt="p", provider=provider, response="r"))

        assert [r.provider for r in usage_store.records] == ["openai", "gemini"]

    async def test_health_check(self, usage_store):
        await usage_store.create_user("bob")
        health = await usage_store.health_check()
        assert health == {"status": "healthy", "backend": "memory", "users": 1, "records": 0}

    def test_implements_protocol(self):
        assert isinstance(InMemoryUsageStore(), UsageLogStore)
