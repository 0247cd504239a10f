"""
Redis store backends

Requires: pip install redis
"""

from .connection import RedisConnection
from .inventory import RedisInventoryStore
from .orders import RedisOrderStore

__all__ = ["RedisConnection", "RedisInventoryStore", "RedisOrderStore"]
