"""
Tests for create_stores
"""

import pytest

from stocksaga.storage import InMemoryInventoryStore, InMemoryOrderStore, create_stores
from stocksaga.storage.backends.redis import RedisInventoryStore, RedisOrderStore


class TestCreateStores:
    def test_memory(self):
        inventory, orders = create_stores("memory://")
        assert isinstance(inventory, InMemoryInventoryStore)
        assert isinstance(orders, InMemoryOrderStore)
        assert not inventory.conditional_decrement

    def test_memory_conditional(self):
        inventory, _ = create_stores("memory://", conditional_decrement=True)
        assert inventory.conditional_decrement

    def test_empty_url_is_memory(self):
        inventory, _ = create_stores("")
        assert isinstance(inventory, InMemoryInventoryStore)

    @pytest.mark.parametrize("url", ["redis://localhost:6379/0", "rediss://cache:6380/1"])
    def test_redis_stores_share_a_connection(self, url):
        inventory, orders = create_stores(url, conditional_decrement=True)

        assert isinstance(inventory, RedisInventoryStore)
        assert isinstance(orders, RedisOrderStore)
        assert inventory._conn is orders._conn
        assert inventory._conn.redis_url == url
        assert inventory.conditional_decrement

    def test_unknown_scheme(self):
        with pytest.raises(ValueError, match="Unknown store URL scheme"):
            create_stores("postgres://localhost/db")
