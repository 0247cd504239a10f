"""
Tests for the in-memory inventory and order stores
"""

import asyncio
from datetime import UTC, datetime

import pytest

from stocksaga.storage import (
    DuplicateOrderError,
    InMemoryInventoryStore,
    InMemoryOrderStore,
    InsufficientStockError,
    NotFoundError,
)
from stocksaga.types import OrderLine


class TestInMemoryInventoryStore:
    @pytest.mark.asyncio
    async def test_get_and_set(self):
        store = InMemoryInventoryStore()
        await store.set_stock("apple", 5)
        assert await store.get("apple") == 5

    @pytest.mark.asyncio
    async def test_missing_item(self):
        store = InMemoryInventoryStore()
        with pytest.raises(NotFoundError) as exc_info:
            await store.get("apple")
        assert exc_info.value.item_id == "apple"

    @pytest.mark.asyncio
    async def test_decrement_missing_item(self):
        with pytest.raises(NotFoundError):
            await InMemoryInventoryStore().decrement_by("apple", 1)

    @pytest.mark.asyncio
    async def test_decrement_and_increment(self):
        store = InMemoryInventoryStore({"apple": 5})
        assert await store.decrement_by("apple", 2) == 3
        assert await store.increment_by("apple", 4) == 7

    @pytest.mark.asyncio
    async def test_unconditional_decrement_goes_negative(self):
        store = InMemoryInventoryStore({"apple": 1})
        assert await store.decrement_by("apple", 2) == -1

    @pytest.mark.asyncio
    async def test_conditional_decrement_rejects(self):
        store = InMemoryInventoryStore({"apple": 1}, conditional_decrement=True)
        with pytest.raises(InsufficientStockError):
            await store.decrement_by("apple", 2)
        assert store.snapshot() == {"apple": 1}

    @pytest.mark.asyncio
    async def test_concurrent_decrements_are_not_lost(self):
        store = InMemoryInventoryStore({"apple": 100}, latency=0.001)
        await asyncio.gather(*(store.decrement_by("apple", 1) for _ in range(50)))
        assert store.snapshot()["apple"] == 50

    @pytest.mark.asyncio
    async def test_health_check(self):
        health = await InMemoryInventoryStore({"apple": 1}).health_check()
        assert health["status"] == "healthy"
        assert health["total_items"] == 1


class TestInMemoryOrderStore:
    @pytest.mark.asyncio
    async def test_put_and_get(self):
        store = InMemoryOrderStore()
        created = datetime.now(UTC)

        await store.put("o-1", (OrderLine("apple", 1),), created)
        order = await store.get("o-1")

        assert order.id == "o-1"
        assert order.created_at == created
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self):
        store = InMemoryOrderStore()
        await store.put("o-1", (OrderLine("apple", 1),), datetime.now(UTC))
        with pytest.raises(DuplicateOrderError):
            await store.put("o-1", (OrderLine("apple", 2),), datetime.now(UTC))

    @pytest.mark.asyncio
    async def test_missing_order(self):
        with pytest.raises(NotFoundError):
            await InMemoryOrderStore().get("o-1")

    @pytest.mark.asyncio
    async def test_list_keeps_insertion_order(self):
        store = InMemoryOrderStore()
        for order_id in ("o-2", "o-1", "o-3"):
            await store.put(order_id, (OrderLine("apple", 1),), datetime.now(UTC))

        assert [o.id for o in await store.list_orders()] == ["o-2", "o-1", "o-3"]

    @pytest.mark.asyncio
    async def test_health_check(self):
        health = await InMemoryOrderStore().health_check()
        assert health["total_orders"] == 0
