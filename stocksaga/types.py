# ============================================
# FILE: stocksaga/types.py
# ============================================

"""
All type definitions, enums, and dataclasses

Value objects for one reservation saga run (order lines, requests, orders),
the per-operation results, and the terminal outcomes returned to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SagaStatus(Enum):
    """
    State of a reservation saga run.

    INIT -> CHECKING -> (ALL_CHECKED | CHECK_FAILED | INDETERMINATE)
    ALL_CHECKED -> EXECUTING -> (COMMITTED | PARTIALLY_FAILED)
    """

    INIT = "init"
    CHECKING = "checking"
    ALL_CHECKED = "all_checked"
    CHECK_FAILED = "check_failed"
    INDETERMINATE = "indeterminate"
    """A check failed transiently; no real shortfall was observed."""

    EXECUTING = "executing"
    COMMITTED = "committed"
    PARTIALLY_FAILED = "partially_failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        SagaStatus.CHECK_FAILED,
        SagaStatus.INDETERMINATE,
        SagaStatus.COMMITTED,
        SagaStatus.PARTIALLY_FAILED,
    }
)


class OperationStatus(Enum):
    """Status of an individual fanned-out store operation"""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class OrderLine:
    """One requested item and quantity. Immutable once constructed."""

    item_id: str
    quantity: int

    def to_dict(self) -> dict[str, Any]:
        return {"itemId": self.item_id, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderLine":
        item_id = data.get("itemId", data.get("item_id"))
        return cls(item_id=item_id, quantity=data.get("quantity"))  # type: ignore[arg-type]


@dataclass(frozen=True)
class SagaRequest:
    """Input to one saga run. Lines keep the order they were submitted in."""

    lines: tuple[OrderLine, ...]

    @classmethod
    def of(cls, *lines: OrderLine) -> "SagaRequest":
        return cls(lines=tuple(lines))

    @property
    def item_ids(self) -> list[str]:
        return [line.item_id for line in self.lines]


@dataclass(frozen=True)
class Order:
    """A recorded order. Created once, never mutated."""

    id: str
    lines: tuple[OrderLine, ...]
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.id,
            "lines": [line.to_dict() for line in self.lines],
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class CheckResult:
    item_id: str
    requested: int
    in_stock: bool


@dataclass(frozen=True)
class ReservationResult:
    item_id: str
    quantity: int
    new_stock: int


@dataclass(frozen=True)
class RecordResult:
    order_id: str
    created_at: datetime


@dataclass
class OperationOutcome:
    """
    Settled result of one fanned-out operation.

    Exactly one of ``value`` or ``error`` is set.
    """

    key: str
    status: OperationStatus
    value: Any = None
    error: Exception | None = None
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == OperationStatus.SUCCEEDED


@dataclass
class PartialFailureDetail:
    """
    What happened in each branch of a failed Executing stage.

    Attributes:
        reserved: Reservations that were applied (item id -> new stock after each one)
        reserved_quantities: Units taken by the applied reservations (item id -> quantity)
        failed_reservations: Reservations that failed (item id -> one error per failed line)
        order_recorded: Whether the order record was written
        order_id: Id of the written order, if any
        order_error: Error raised by the order write, if any
    """

    reserved: dict[str, list[int]] = field(default_factory=dict)
    failed_reservations: dict[str, list[Exception]] = field(default_factory=dict)
    reserved_quantities: dict[str, int] = field(default_factory=dict)
    order_recorded: bool = False
    order_id: str | None = None
    order_error: Exception | None = None

    @property
    def reservation_branch_failed(self) -> bool:
        return bool(self.failed_reservations)

    @property
    def order_branch_failed(self) -> bool:
        return not self.order_recorded

    @property
    def failed_branches(self) -> list[str]:
        branches = []
        if self.reservation_branch_failed:
            branches.append("reserve_stock")
        if self.order_branch_failed:
            branches.append("record_order")
        return branches

    def to_dict(self) -> dict[str, Any]:
        return {
            "failedBranches": self.failed_branches,
            "reservedItemIds": list(self.reserved),
            "failedReservations": {
                item_id: [f"{type(error).__name__}: {error}" for error in errors]
                for item_id, errors in self.failed_reservations.items()
            },
            "orderRecorded": self.order_recorded,
            "orderId": self.order_id,
            "orderError": (
                f"{type(self.order_error).__name__}: {self.order_error}"
                if self.order_error
                else None
            ),
        }


@dataclass
class SagaOutcome:
    """
    Terminal result of a saga run.

    Subclasses map to the caller-facing responses via ``to_response()``.
    """

    saga_id: str
    status: SagaStatus
    execution_time: float = field(default=0.0, kw_only=True)
    path: list[SagaStatus] = field(default_factory=list, kw_only=True)
    """Statuses the run passed through, ending with ``status``."""

    accepted = False
    http_status = 500
    reason = ""

    @property
    def is_committed(self) -> bool:
        return self.status == SagaStatus.COMMITTED

    def body(self) -> dict[str, Any]:
        return {"accepted": self.accepted, "reason": self.reason}

    def to_response(self) -> tuple[int, dict[str, Any]]:
        return self.http_status, self.body()


@dataclass
class Committed(SagaOutcome):
    """Every reservation applied and the order was recorded."""

    order_id: str = ""
    reservations: list[ReservationResult] = field(default_factory=list)

    accepted = True
    http_status = 200

    def body(self) -> dict[str, Any]:
        return {"accepted": True, "orderId": self.order_id}


@dataclass
class InsufficientStock(SagaOutcome):
    """At least one line is short of stock or names an unknown item. Nothing was mutated."""

    failing_item_ids: list[str] = field(default_factory=list)

    http_status = 409
    reason = "insufficient_stock"

    def body(self) -> dict[str, Any]:
        return {**super().body(), "failingItemIds": list(self.failing_item_ids)}


@dataclass
class Indeterminate(SagaOutcome):
    """A check failed transiently, so stock could not be confirmed. Nothing was mutated."""

    item_ids: list[str] = field(default_factory=list)
    errors: dict[str, Exception] = field(default_factory=dict)

    http_status = 503
    reason = "indeterminate"

    def body(self) -> dict[str, Any]:
        return {**super().body(), "itemIds": list(self.item_ids)}


@dataclass
class PartialFailure(SagaOutcome):
    """Executing started but at least one branch failed. No compensation was applied."""

    detail: PartialFailureDetail = field(default_factory=PartialFailureDetail)

    http_status = 500
    reason = "partial_failure"

    def body(self) -> dict[str, Any]:
        return {**super().body(), "detail": self.detail.to_dict()}
