"""
In-memory inventory store

Provides a simple in-memory stock table for development and testing.
Not suitable for production use as state is lost on process restart.
"""

import asyncio
from typing import Any

from stocksaga.storage.base import InventoryStore
from stocksaga.storage.core.errors import InsufficientStockError, NotFoundError


class InMemoryInventoryStore(InventoryStore):
    """
    In-memory implementation of the inventory store

    Every update runs under a single ``asyncio.Lock``, so concurrent
    decrements of the same item serialize. ``latency`` adds an awaited
    delay before each call to mimic a remote store.
    """

    def __init__(
        self,
        stock: dict[str, int] | None = None,
        conditional_decrement: bool = False,
        latency: float = 0.0,
    ):
        self._stock: dict[str, int] = dict(stock or {})
        self._lock = asyncio.Lock()
        self.conditional_decrement = conditional_decrement
        self.latency = latency

    async def _simulate_io(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def get(self, item_id: str) -> int:
        await self._simulate_io()
        async with self._lock:
            return self._lookup(item_id)

    async def decrement_by(self, item_id: str, amount: int) -> int:
        await self._simulate_io()
        async with self._lock:
            current = self._lookup(item_id)
            new_stock = current - amount
            if self.conditional_decrement and new_stock < 0:
                raise InsufficientStockError(
                    f"Cannot reserve {amount} of {item_id}",
                    item_id=item_id,
                    requested=amount,
                    available=current,
                )
            self._stock[item_id] = new_stock
            return new_stock

    async def increment_by(self, item_id: str, amount: int) -> int:
        await self._simulate_io()
        async with self._lock:
            new_stock = self._lookup(item_id) + amount
            self._stock[item_id] = new_stock
            return new_stock

    async def set_stock(self, item_id: str, stock: int) -> None:
        async with self._lock:
            self._stock[item_id] = stock

    def _lookup(self, item_id: str) -> int:
        try:
            return self._stock[item_id]
        except KeyError:
            raise NotFoundError(
                f"Item {item_id} not found", item_type="inventory_item", item_id=item_id
            ) from None

    def snapshot(self) -> dict[str, int]:
        """Copy of current stock levels (synchronous for testing)"""
        return dict(self._stock)

    async def health_check(self) -> dict[str, Any]:
        async with self._lock:
            return {
                "status": "healthy",
                "store_type": "in_memory",
                "total_items": len(self._stock),
                "conditional_decrement": self.conditional_decrement,
            }
