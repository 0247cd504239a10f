"""
Tests for saga value objects and outcome serialisation
"""

from datetime import UTC, datetime

from stocksaga.storage import StoreUnavailableError
from stocksaga.types import (
    Committed,
    Indeterminate,
    InsufficientStock,
    Order,
    OrderLine,
    PartialFailure,
    PartialFailureDetail,
    SagaRequest,
    SagaStatus,
)


class TestOrderLine:
    def test_round_trip_with_camel_case(self):
        line = OrderLine.from_dict({"itemId": "apple", "quantity": 2})
        assert line == OrderLine("apple", 2)
        assert line.to_dict() == {"itemId": "apple", "quantity": 2}

    def test_order_to_dict(self):
        created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        order = Order(id="o-1", lines=(OrderLine("apple", 1),), created_at=created)

        assert order.to_dict() == {
            "orderId": "o-1",
            "lines": [{"itemId": "apple", "quantity": 1}],
            "createdAt": "2024-01-02T03:04:05+00:00",
        }

    def test_saga_request_of(self):
        request = SagaRequest.of(OrderLine("a", 1), OrderLine("b", 2))
        assert request.item_ids == ["a", "b"]


class TestOutcomes:
    def test_committed_response(self):
        outcome = Committed(saga_id="s", status=SagaStatus.COMMITTED, order_id="o-1")
        assert outcome.to_response() == (200, {"accepted": True, "orderId": "o-1"})
        assert outcome.is_committed

    def test_insufficient_stock_response(self):
        outcome = InsufficientStock(
            saga_id="s", status=SagaStatus.CHECK_FAILED, failing_item_ids=["a"]
        )
        assert outcome.to_response() == (
            409,
            {"accepted": False, "reason": "insufficient_stock", "failingItemIds": ["a"]},
        )
        assert not outcome.is_committed

    def test_indeterminate_response(self):
        outcome = Indeterminate(saga_id="s", status=SagaStatus.INDETERMINATE, item_ids=["a"])
        status, body = outcome.to_response()
        assert status == 503
        assert body["itemIds"] == ["a"]

    def test_partial_failure_detail(self):
        detail = PartialFailureDetail(
            reserved={"a": [4]},
            failed_reservations={"b": [StoreUnavailableError("down")]},
            order_recorded=False,
            order_error=StoreUnavailableError("orders down"),
        )
        outcome = PartialFailure(saga_id="s", status=SagaStatus.PARTIALLY_FAILED, detail=detail)

        status, body = outcome.to_response()

        assert status == 500
        assert body["reason"] == "partial_failure"
        assert body["detail"]["failedBranches"] == ["reserve_stock", "record_order"]
        assert body["detail"]["reservedItemIds"] == ["a"]
        assert body["detail"]["failedReservations"]["b"][0].startswith("StoreUnavailableError")
        assert body["detail"]["orderError"].startswith("StoreUnavailableError")

    def test_partial_failure_with_recorded_order(self):
        detail = PartialFailureDetail(
            failed_reservations={"b": [StoreUnavailableError("down")]},
            order_recorded=True,
            order_id="o-1",
        )
        assert detail.failed_branches == ["reserve_stock"]
        assert detail.to_dict()["orderError"] is None
