"""
Redis inventory store

Each item is a plain integer key, ``<prefix>item:<id>``. Decrements run as
Lua scripts so the existence check, the optional non-negative guard and the
arithmetic update apply as one atomic Redis operation.
"""

from typing import Any

from stocksaga.storage.backends.redis.connection import RedisConnection
from stocksaga.storage.base import InventoryStore
from stocksaga.storage.core.errors import InsufficientStockError, NotFoundError

# Reply is {status, value}: 0 = applied (value = new stock),
# 1 = missing key, 2 = rejected by guard (value = current stock).
_ADJUST_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then
    return {1, 0}
end
local delta = tonumber(ARGV[1])
local guarded = ARGV[2] == '1'
local new_stock = tonumber(current) + delta
if guarded and new_stock < 0 then
    return {2, tonumber(current)}
end
redis.call('SET', KEYS[1], new_stock)
return {0, new_stock}
"""

_APPLIED, _MISSING, _REJECTED = 0, 1, 2


class RedisInventoryStore(InventoryStore):
    """
    Redis implementation of the inventory store

    Example:
        >>> store = RedisInventoryStore("redis://localhost:6379", conditional_decrement=True)
        >>> await store.set_stock("sku-1", 5)
        >>> await store.decrement_by("sku-1", 2)
        3
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "stocksaga:",
        conditional_decrement: bool = False,
        connection: RedisConnection | None = None,
        **redis_kwargs,
    ):
        self._conn = connection or RedisConnection(redis_url, key_prefix, **redis_kwargs)
        self.conditional_decrement = conditional_decrement

    def _item_key(self, item_id: str) -> str:
        return self._conn.key("item", item_id)

    async def get(self, item_id: str) -> int:
        client = await self._conn.client()
        raw = await self._conn.call(client.get(self._item_key(item_id)))
        if raw is None:
            raise NotFoundError(
                f"Item {item_id} not found", item_type="inventory_item", item_id=item_id
            )
        return int(raw)

    async def decrement_by(self, item_id: str, amount: int) -> int:
        return await self._adjust(item_id, -amount, guarded=self.conditional_decrement)

    async def increment_by(self, item_id: str, amount: int) -> int:
        return await self._adjust(item_id, amount, guarded=False)

    async def set_stock(self, item_id: str, stock: int) -> None:
        client = await self._conn.client()
        await self._conn.call(client.set(self._item_key(item_id), stock))

    async def _adjust(self, item_id: str, delta: int, guarded: bool) -> int:
        client = await self._conn.client()
        status, value = await self._conn.call(
            client.eval(_ADJUST_SCRIPT, 1, self._item_key(item_id), delta, "1" if guarded else "0")
        )
        status, value = int(status), int(value)
        if status == _MISSING:
            raise NotFoundError(
                f"Item {item_id} not found", item_type="inventory_item", item_id=item_id
            )
        if status == _REJECTED:
            raise InsufficientStockError(
                f"Cannot reserve {-delta} of {item_id}",
                item_id=item_id,
                requested=-delta,
                available=value,
            )
        return value

    async def health_check(self) -> dict[str, Any]:
        client = await self._conn.client()
        await self._conn.call(client.ping())
        return {
            "status": "healthy",
            "store_type": "redis",
            "conditional_decrement": self.conditional_decrement,
        }

    async def close(self) -> None:
        await self._conn.close()

    async def __aenter__(self):
        await self._conn.client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
