"""
In-memory order store

Append-only; orders are kept in insertion order.
"""

import asyncio
from datetime import datetime
from typing import Any

from stocksaga.storage.base import OrderStore
from stocksaga.storage.core.errors import DuplicateOrderError, NotFoundError
from stocksaga.types import Order, OrderLine


class InMemoryOrderStore(OrderStore):
    """In-memory implementation of the order store"""

    def __init__(self, latency: float = 0.0):
        self._orders: dict[str, Order] = {}
        self._lock = asyncio.Lock()
        self.latency = latency

    async def put(self, order_id: str, lines: tuple[OrderLine, ...], created_at: datetime) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        async with self._lock:
            if order_id in self._orders:
                raise DuplicateOrderError(order_id)
            self._orders[order_id] = Order(id=order_id, lines=tuple(lines), created_at=created_at)

    async def get(self, order_id: str) -> Order:
        async with self._lock:
            order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found", item_type="order", item_id=order_id)
        return order

    async def list_orders(self) -> list[Order]:
        async with self._lock:
            return list(self._orders.values())

    def get_order_count(self) -> int:
        """Get current order count (synchronous for testing)"""
        return len(self._orders)

    async def health_check(self) -> dict[str, Any]:
        async with self._lock:
            return {"status": "healthy", "store_type": "in_memory", "total_orders": len(self._orders)}
