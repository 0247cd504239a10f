"""
Inventory and order store abstractions and implementations

Quick Start:
    >>> from stocksaga.storage import create_stores

    # In-memory (for development/testing)
    >>> inventory, orders = create_stores("memory://")

    # Redis, rejecting decrements that would go negative
    >>> inventory, orders = create_stores("redis://localhost:6379", conditional_decrement=True)
"""

from .backends.memory import InMemoryInventoryStore, InMemoryOrderStore
from .base import InventoryStore, OrderStore
from .core.errors import (
    DuplicateOrderError,
    InsufficientStockError,
    NotFoundError,
    StorageError,
    StoreUnavailableError,
)
from .factory import create_stores

__all__ = [
    # Factory
    "create_stores",
    # Interfaces
    "InventoryStore",
    "OrderStore",
    # Backends
    "InMemoryInventoryStore",
    "InMemoryOrderStore",
    # Errors
    "StorageError",
    "StoreUnavailableError",
    "NotFoundError",
    "InsufficientStockError",
    "DuplicateOrderError",
]
