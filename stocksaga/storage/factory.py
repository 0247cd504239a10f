"""
Store Factory - Simplified API for creating inventory and order stores

Builds a matching inventory/order store pair from a backend name or URL
without importing backend classes directly.
"""

from stocksaga.storage.backends.memory import InMemoryInventoryStore, InMemoryOrderStore
from stocksaga.storage.base import InventoryStore, OrderStore


def _create_memory_stores(url: str, conditional_decrement: bool) -> tuple[InventoryStore, OrderStore]:
    return InMemoryInventoryStore(conditional_decrement=conditional_decrement), InMemoryOrderStore()


def _create_redis_stores(url: str, conditional_decrement: bool) -> tuple[InventoryStore, OrderStore]:
    from stocksaga.storage.backends.redis import (
        RedisConnection,
        RedisInventoryStore,
        RedisOrderStore,
    )

    connection = RedisConnection(url)
    return (
        RedisInventoryStore(connection=connection, conditional_decrement=conditional_decrement),
        RedisOrderStore(connection=connection),
    )


# Store registry mapping URL schemes to factory functions
_STORE_REGISTRY = {
    "memory": _create_memory_stores,
    "redis": _create_redis_stores,
    "rediss": _create_redis_stores,
}


def create_stores(
    url: str = "memory://",
    *,
    conditional_decrement: bool = False,
) -> tuple[InventoryStore, OrderStore]:
    """
    Create an inventory store and an order store sharing one backend.

    Args:
        url: ``memory://`` or a Redis URL (``redis://host:6379/0``)
        conditional_decrement: Reject decrements that would drive stock negative

    Returns:
        ``(inventory_store, order_store)``

    Example:
        >>> inventory, orders = create_stores("redis://localhost:6379/0")
    """
    scheme = url.split("://", 1)[0].lower() if url else "memory"
    factory = _STORE_REGISTRY.get(scheme)
    if factory is None:
        available = ", ".join(sorted(_STORE_REGISTRY))
        msg = f"Unknown store URL scheme: {url!r}. Available: {available}"
        raise ValueError(msg)
    return factory(url, conditional_decrement)
