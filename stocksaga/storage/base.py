"""
Base store interfaces for the reservation saga.

Defines the boundary contracts the orchestrator depends on, enabling
pluggable store backends (memory, Redis).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from stocksaga.types import Order, OrderLine


class InventoryStore(ABC):
    """
    Abstract key-value store of stock levels keyed by item id

    Every mutation is a single atomic store operation. No multi-item
    transaction is offered.
    """

    conditional_decrement: bool = False

    @abstractmethod
    async def get(self, item_id: str) -> int:
        """
        Read current stock for an item

        Raises:
            NotFoundError: If no record exists for ``item_id``
            StoreUnavailableError: On transient backend errors
        """

    @abstractmethod
    async def decrement_by(self, item_id: str, amount: int) -> int:
        """
        Atomically subtract ``amount`` from stock and return the new value

        An unconditional store applies the subtraction even when the result
        is negative. A conditional store rejects it instead.

        Raises:
            NotFoundError: If no record exists for ``item_id``
            InsufficientStockError: Conditional store only, when the result would be negative
            StoreUnavailableError: On transient backend errors
        """

    @abstractmethod
    async def increment_by(self, item_id: str, amount: int) -> int:
        """
        Atomically add ``amount`` to stock and return the new value

        Used to release a reservation during reconciliation.
        """

    @abstractmethod
    async def set_stock(self, item_id: str, stock: int) -> None:
        """Create or overwrite an item's stock level (seeding, admin)"""

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy", "store_type": type(self).__name__}


class OrderStore(ABC):
    """
    Abstract append-only store of orders keyed by order id
    """

    @abstractmethod
    async def put(self, order_id: str, lines: tuple[OrderLine, ...], created_at: datetime) -> None:
        """
        Persist a new order record

        Raises:
            DuplicateOrderError: If ``order_id`` already exists
            StoreUnavailableError: On transient backend errors
        """

    @abstractmethod
    async def get(self, order_id: str) -> Order:
        """
        Load an order

        Raises:
            NotFoundError: If the order does not exist
        """

    @abstractmethod
    async def list_orders(self) -> list[Order]:
        """All orders, oldest first"""

    async def count(self) -> int:
        return len(await self.list_orders())

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy", "store_type": type(self).__name__}
