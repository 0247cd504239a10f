# ============================================
# FILE: stocksaga/__init__.py
# ============================================

"""
stocksaga - All-or-nothing stock reservation for order fulfillment

Checks every line of an order against stock concurrently and, only if every
line is available, reserves stock for each line and records the order in
parallel. Each run ends in one structured outcome:

- Committed: every reservation applied and the order recorded
- InsufficientStock: a line was short or unknown; nothing changed
- Indeterminate: a check failed transiently; nothing changed
- PartialFailure: execution started and a branch failed; no compensation

Usage:
    >>> from stocksaga import ReservationSaga, SagaConfig, SagaRequest, OrderLine
    >>> from stocksaga.storage import create_stores
    >>>
    >>> inventory, orders = create_stores("memory://")
    >>> await inventory.set_stock("sku-1", 5)
    >>> saga = ReservationSaga(SagaConfig(inventory_store=inventory, order_store=orders))
    >>> outcome = await saga.run(SagaRequest.of(OrderLine("sku-1", 2)))
    >>> outcome.to_response()
    (200, {'accepted': True, 'orderId': '...'})

HTTP-style entry point:
    >>> status, body = await saga.place_order({"lines": [{"itemId": "sku-1", "quantity": 2}]})
"""

from stocksaga.core.config import SagaConfig, configure, get_config
from stocksaga.core.exceptions import (
    EmptyOrderError,
    InvalidStateTransitionError,
    SagaError,
    SagaTimeoutError,
    ValidationError,
)
from stocksaga.orchestrator import ReservationSaga
from stocksaga.reconciliation import ReconciliationReport, SagaReconciler
from stocksaga.state_machine import SagaStateMachine
from stocksaga.types import (
    CheckResult,
    Committed,
    Indeterminate,
    InsufficientStock,
    OperationOutcome,
    OperationStatus,
    Order,
    OrderLine,
    PartialFailure,
    PartialFailureDetail,
    RecordResult,
    ReservationResult,
    SagaOutcome,
    SagaRequest,
    SagaStatus,
)

__version__ = "0.1.0"

__all__ = [
    # Orchestration
    "ReservationSaga",
    "SagaStateMachine",
    "SagaReconciler",
    "ReconciliationReport",
    # Configuration
    "SagaConfig",
    "configure",
    "get_config",
    # Types
    "OrderLine",
    "SagaRequest",
    "Order",
    "CheckResult",
    "ReservationResult",
    "RecordResult",
    "OperationOutcome",
    "OperationStatus",
    "SagaStatus",
    "PartialFailureDetail",
    # Outcomes
    "SagaOutcome",
    "Committed",
    "InsufficientStock",
    "Indeterminate",
    "PartialFailure",
    # Exceptions
    "SagaError",
    "ValidationError",
    "EmptyOrderError",
    "SagaTimeoutError",
    "InvalidStateTransitionError",
]
