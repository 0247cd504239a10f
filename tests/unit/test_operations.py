"""
Tests for the availability checker, reservation executor, order recorder
and request validation
"""

from unittest.mock import AsyncMock

import pytest

from stocksaga.core.exceptions import EmptyOrderError, ValidationError
from stocksaga.operations import (
    AvailabilityChecker,
    OrderRecorder,
    StockReservationExecutor,
    merge_lines,
    parse_request,
)
from stocksaga.operations.validation import validate_lines
from stocksaga.storage import (
    DuplicateOrderError,
    InMemoryInventoryStore,
    InMemoryOrderStore,
    InsufficientStockError,
    InventoryStore,
    NotFoundError,
)
from stocksaga.types import OrderLine


class TestAvailabilityChecker:
    @pytest.mark.asyncio
    async def test_in_stock(self):
        checker = AvailabilityChecker(InMemoryInventoryStore({"apple": 3}))

        result = await checker.check("apple", 3)

        assert result.in_stock
        assert result.item_id == "apple"
        assert result.requested == 3

    @pytest.mark.asyncio
    async def test_short(self):
        checker = AvailabilityChecker(InMemoryInventoryStore({"apple": 3}))
        assert not (await checker.check("apple", 4)).in_stock

    @pytest.mark.asyncio
    async def test_unknown_item(self):
        checker = AvailabilityChecker(InMemoryInventoryStore())
        with pytest.raises(NotFoundError):
            await checker.check("apple", 1)

    @pytest.mark.asyncio
    async def test_check_does_not_mutate(self):
        store = InMemoryInventoryStore({"apple": 3})
        await AvailabilityChecker(store).check("apple", 1)
        assert store.snapshot() == {"apple": 3}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("item_id,qty", [("", 1), (None, 1), ("apple", 0), ("apple", 1.5)])
    async def test_invalid_input_skips_store(self, item_id, qty):
        store = AsyncMock(spec=InventoryStore)
        with pytest.raises(ValidationError):
            await AvailabilityChecker(store).check(item_id, qty)
        store.get.assert_not_awaited()


class TestStockReservationExecutor:
    @pytest.mark.asyncio
    async def test_reserve(self):
        store = InMemoryInventoryStore({"apple": 3})

        result = await StockReservationExecutor(store).reserve("apple", 2)

        assert result.new_stock == 1
        assert result.quantity == 2
        assert store.snapshot()["apple"] == 1

    @pytest.mark.asyncio
    async def test_unconditional_store_goes_negative(self):
        store = InMemoryInventoryStore({"apple": 1})
        result = await StockReservationExecutor(store).reserve("apple", 3)
        assert result.new_stock == -2

    @pytest.mark.asyncio
    async def test_conditional_store_rejects(self):
        store = InMemoryInventoryStore({"apple": 1}, conditional_decrement=True)

        with pytest.raises(InsufficientStockError) as exc_info:
            await StockReservationExecutor(store).reserve("apple", 3)

        assert exc_info.value.available == 1
        assert store.snapshot()["apple"] == 1

    @pytest.mark.asyncio
    async def test_store_error_propagates(self):
        store = AsyncMock(spec=InventoryStore)
        store.decrement_by.side_effect = NotFoundError("gone", item_id="apple")

        with pytest.raises(NotFoundError):
            await StockReservationExecutor(store).reserve("apple", 1)


class TestOrderRecorder:
    @pytest.mark.asyncio
    async def test_record_writes_order(self):
        store = InMemoryOrderStore()
        recorder = OrderRecorder(store, id_generator=lambda: "order-42")

        result = await recorder.record([OrderLine("apple", 2)])

        assert result.order_id == "order-42"
        order = await store.get("order-42")
        assert order.lines == (OrderLine("apple", 2),)
        assert order.created_at == result.created_at
        assert order.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_record_is_not_idempotent(self):
        store = InMemoryOrderStore()
        recorder = OrderRecorder(store)
        lines = [OrderLine("apple", 1)]

        first = await recorder.record(lines)
        second = await recorder.record(lines)

        assert first.order_id != second.order_id
        assert store.get_order_count() == 2

    @pytest.mark.asyncio
    async def test_duplicate_generated_id_is_rejected(self):
        recorder = OrderRecorder(InMemoryOrderStore(), id_generator=lambda: "same")
        await recorder.record([OrderLine("apple", 1)])

        with pytest.raises(DuplicateOrderError):
            await recorder.record([OrderLine("apple", 1)])

    @pytest.mark.asyncio
    async def test_empty_lines_rejected(self):
        with pytest.raises(EmptyOrderError):
            await OrderRecorder(InMemoryOrderStore()).record([])


class TestValidation:
    def test_parse_request(self):
        request = parse_request(
            {"lines": [{"itemId": "apple", "quantity": 2}, {"itemId": "banana", "quantity": 1}]}
        )
        assert request.lines == (OrderLine("apple", 2), OrderLine("banana", 1))
        assert request.item_ids == ["apple", "banana"]

    def test_parse_request_missing_lines(self):
        with pytest.raises(EmptyOrderError):
            parse_request({})

    def test_parse_request_not_a_dict(self):
        with pytest.raises(ValidationError):
            parse_request("lines")

    def test_validate_lines_rejects_non_lines(self):
        with pytest.raises(ValidationError):
            validate_lines([("apple", 1)])

    def test_merge_lines_sums_and_keeps_first_position(self):
        merged = merge_lines(
            [OrderLine("b", 1), OrderLine("a", 2), OrderLine("b", 3), OrderLine("c", 1)]
        )
        assert merged == (OrderLine("b", 4), OrderLine("a", 2), OrderLine("c", 1))

    def test_merge_lines_without_duplicates_is_unchanged(self):
        lines = (OrderLine("a", 1), OrderLine("b", 2))
        assert merge_lines(lines) == lines
