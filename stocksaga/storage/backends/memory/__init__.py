"""In-memory store backends"""

from .inventory import InMemoryInventoryStore
from .orders import InMemoryOrderStore

__all__ = ["InMemoryInventoryStore", "InMemoryOrderStore"]
