"""
Pytest configuration and shared fixtures for reservation saga tests
"""

import asyncio
import itertools

import pytest

from stocksaga import ReservationSaga, SagaConfig
from stocksaga.storage import InMemoryInventoryStore, InMemoryOrderStore, StoreUnavailableError

# ============================================
# STORE DOUBLES
# ============================================


class FlakyInventoryStore(InMemoryInventoryStore):
    """
    In-memory inventory that fails selected items.

    Items in ``fail_get`` / ``fail_decrement`` / ``fail_increment`` raise
    StoreUnavailableError. Items in ``slow_decrement`` sleep before decrementing.
    """

    def __init__(self, stock=None, *, fail_get=(), fail_decrement=(), fail_increment=(),
                 slow_decrement=(), slow_seconds=1.0, **kwargs):
        super().__init__(stock, **kwargs)
        self.fail_get = set(fail_get)
        self.fail_decrement = set(fail_decrement)
        self.fail_increment = set(fail_increment)
        self.slow_decrement = set(slow_decrement)
        self.slow_seconds = slow_seconds
        self.get_calls: list[str] = []
        self.decrement_calls: list[tuple[str, int]] = []

    async def get(self, item_id):
        self.get_calls.append(item_id)
        if item_id in self.fail_get:
            raise StoreUnavailableError("inventory down", backend="memory")
        return await super().get(item_id)

    async def decrement_by(self, item_id, amount):
        self.decrement_calls.append((item_id, amount))
        if item_id in self.fail_decrement:
            raise StoreUnavailableError("inventory down", backend="memory")
        if item_id in self.slow_decrement:
            await asyncio.sleep(self.slow_seconds)
        return await super().decrement_by(item_id, amount)

    async def increment_by(self, item_id, amount):
        if item_id in self.fail_increment:
            raise StoreUnavailableError("inventory down", backend="memory")
        return await super().increment_by(item_id, amount)


class FailingOrderStore(InMemoryOrderStore):
    """Order store whose writes always fail transiently"""

    async def put(self, order_id, lines, created_at):
        raise StoreUnavailableError("orders down", backend="memory")


def sequential_ids(prefix: str = "order"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


# ============================================
# FIXTURES
# ============================================


@pytest.fixture
def inventory():
    return InMemoryInventoryStore({"apple": 10, "banana": 5, "cherry": 1})


@pytest.fixture
def orders():
    return InMemoryOrderStore()


@pytest.fixture
def make_saga():
    """Build a ReservationSaga over the given stores with deterministic order ids."""

    def _make(inventory_store, order_store, **config_kwargs):
        config = SagaConfig(inventory_store=inventory_store, order_store=order_store, **config_kwargs)
        return ReservationSaga(config, id_generator=sequential_ids())

    return _make


@pytest.fixture
def saga(make_saga, inventory, orders):
    return make_saga(inventory, orders)


@pytest.fixture
def flaky_inventory():
    """Factory for FlakyInventoryStore"""
    return FlakyInventoryStore


@pytest.fixture
def failing_orders():
    return FailingOrderStore()
