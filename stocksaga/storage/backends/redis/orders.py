"""
Redis order store

Orders are JSON documents under ``<prefix>order:<id>``. A list key keeps
insertion order for listing. One Lua script writes the document and appends
the id to the list, so an order is either stored and indexed or not stored
at all, and an existing order is never overwritten.
"""

import json
from datetime import datetime

from stocksaga.storage.backends.redis.connection import RedisConnection
from stocksaga.storage.base import OrderStore
from stocksaga.storage.core.errors import DuplicateOrderError, NotFoundError, StorageError
from stocksaga.types import Order, OrderLine

# Returns 1 when written, 0 when the order already exists.
_PUT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('SET', KEYS[1], ARGV[1])
redis.call('RPUSH', KEYS[2], ARGV[2])
return 1
"""


class RedisOrderStore(OrderStore):
    """Redis implementation of the order store"""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "stocksaga:",
        connection: RedisConnection | None = None,
        **redis_kwargs,
    ):
        self._conn = connection or RedisConnection(redis_url, key_prefix, **redis_kwargs)

    def _order_key(self, order_id: str) -> str:
        return self._conn.key("order", order_id)

    def _index_key(self) -> str:
        return self._conn.key("index", "orders")

    async def put(self, order_id: str, lines: tuple[OrderLine, ...], created_at: datetime) -> None:
        client = await self._conn.client()
        document = json.dumps(
            {
                "order_id": order_id,
                "lines": [line.to_dict() for line in lines],
                "created_at": created_at.isoformat(),
            }
        )
        written = await self._conn.call(
            client.eval(
                _PUT_SCRIPT, 2, self._order_key(order_id), self._index_key(), document, order_id
            )
        )
        if not int(written):
            raise DuplicateOrderError(order_id)

    async def get(self, order_id: str) -> Order:
        client = await self._conn.client()
        raw = await self._conn.call(client.get(self._order_key(order_id)))
        if raw is None:
            raise NotFoundError(f"Order {order_id} not found", item_type="order", item_id=order_id)
        return self._decode(order_id, raw)

    async def list_orders(self) -> list[Order]:
        client = await self._conn.client()
        order_ids = await self._conn.call(client.lrange(self._index_key(), 0, -1))
        return [await self.get(order_id) for order_id in order_ids]

    async def count(self) -> int:
        client = await self._conn.client()
        return int(await self._conn.call(client.llen(self._index_key())))

    @staticmethod
    def _decode(order_id: str, raw: str) -> Order:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            msg = f"Failed to decode order {order_id}: {e}"
            raise StorageError(msg) from e
        return Order(
            id=data["order_id"],
            lines=tuple(OrderLine.from_dict(line) for line in data["lines"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )

    async def close(self) -> None:
        await self._conn.close()
