"""
Reservation saga orchestrator

Drives one order through the all-or-nothing reservation workflow:

    1. CHECKING   - check stock for every line concurrently, join on all results
    2. EXECUTING  - only if every check passed, concurrently:
                    a. reserve stock for every line (fan-out)
                    b. record the order once
    3. Report a terminal outcome

There is no cross-item transaction. A failure in EXECUTING is reported as
``PartialFailure`` with per-branch detail, and nothing is rolled back here.
Compensation is the job of ``stocksaga.reconciliation.SagaReconciler``.

Usage:
    >>> saga = ReservationSaga(SagaConfig(inventory_store=inventory, order_store=orders))
    >>> outcome = await saga.run(SagaRequest.of(OrderLine("sku-1", 2)))
    >>> status, body = outcome.to_response()
"""

import asyncio
import time
from functools import partial
from typing import Any

from stocksaga.core.config import SagaConfig, get_config
from stocksaga.core.exceptions import ValidationError
from stocksaga.core.ids import IdGenerator, generate_id
from stocksaga.core.logger import get_logger
from stocksaga.monitoring.logging import SagaLogger, saga_logger
from stocksaga.operations import AvailabilityChecker, OrderRecorder, StockReservationExecutor
from stocksaga.operations.validation import merge_lines, parse_request, validate_lines
from stocksaga.state_machine import SagaStateMachine
from stocksaga.storage.core.errors import NotFoundError
from stocksaga.strategies import FanOutCall, ParallelExecutionStrategy, WaitAllStrategy
from stocksaga.types import (
    CheckResult,
    Committed,
    Indeterminate,
    InsufficientStock,
    OperationOutcome,
    OrderLine,
    PartialFailure,
    PartialFailureDetail,
    SagaOutcome,
    SagaRequest,
    SagaStatus,
)

logger = get_logger(__name__)


class ReservationSaga:
    """
    Orchestrator for the order-fulfillment reservation saga.

    One instance can run any number of sagas, concurrently or not; it holds
    no per-run state. Stores and timeouts come from ``SagaConfig``.

    Args:
        config: Saga configuration (defaults to the global config)
        id_generator: Order id generator passed to the order recorder
        strategy: Fan-out/join strategy (defaults to WaitAllStrategy)
        logger: Structured saga logger (defaults to the module-level one)
    """

    saga_name = "order-fulfillment"

    def __init__(
        self,
        config: SagaConfig | None = None,
        *,
        id_generator: IdGenerator = generate_id,
        strategy: ParallelExecutionStrategy | None = None,
        logger: SagaLogger | None = None,
    ):
        self.config = config or get_config()
        self.checker = AvailabilityChecker(self.config.inventory_store)
        self.executor = StockReservationExecutor(self.config.inventory_store)
        self.recorder = OrderRecorder(self.config.order_store, id_generator=id_generator)
        self.strategy = strategy or WaitAllStrategy()
        self.metrics = self.config.metrics_collector
        self._log = (logger or saga_logger) if self.config.logging else None

    # ------------------------------------------------------------------
    # Caller-facing entry points
    # ------------------------------------------------------------------

    async def place_order(self, payload: Any) -> tuple[int, dict[str, Any]]:
        """
        Run a saga for a raw caller payload and return ``(status_code, body)``.

        Malformed payloads are rejected with 400 before any store call.
        """
        try:
            request = parse_request(payload)
        except ValidationError as e:
            return 400, {
                "accepted": False,
                "reason": "validation_error",
                "message": str(e),
                "field": e.field,
            }
        outcome = await self.run(request)
        return outcome.to_response()

    async def run(self, request: SagaRequest) -> SagaOutcome:
        """
        Execute one saga run.

        Raises:
            ValidationError: The request is malformed (no store call was made)

        Returns:
            Committed, InsufficientStock, Indeterminate or PartialFailure
        """
        lines = validate_lines(request.lines)
        saga_id = generate_id()
        machine = SagaStateMachine(saga_id, on_transition=self._on_transition)

        if self._log:
            self._log.saga_started(saga_id, self.saga_name, len(lines))
        if self.metrics:
            self.metrics.saga_started(self.saga_name)

        start_time = time.perf_counter()
        try:
            outcome = await self._execute(saga_id, machine, lines)
        finally:
            if self.metrics:
                self.metrics.saga_finished(self.saga_name)

        outcome.execution_time = time.perf_counter() - start_time
        outcome.path = machine.path

        if self.metrics:
            self.metrics.record_execution(self.saga_name, outcome.status, outcome.execution_time)
        if self._log:
            self._log.saga_finished(
                saga_id, self.saga_name, outcome.status, outcome.execution_time * 1000
            )
        return outcome

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _execute(
        self, saga_id: str, machine: SagaStateMachine, lines: tuple[OrderLine, ...]
    ) -> SagaOutcome:
        targets = merge_lines(lines) if self.config.merge_duplicate_lines else lines

        machine.transition(SagaStatus.CHECKING)
        checks = await self._check_all(targets)

        shortfalls, transient = self._evaluate_checks(saga_id, checks)
        if shortfalls:
            machine.transition(SagaStatus.CHECK_FAILED)
            return InsufficientStock(
                saga_id=saga_id, status=machine.status, failing_item_ids=shortfalls
            )
        if transient:
            machine.transition(SagaStatus.INDETERMINATE)
            return Indeterminate(
                saga_id=saga_id,
                status=machine.status,
                item_ids=list(transient),
                errors=transient,
            )

        machine.transition(SagaStatus.ALL_CHECKED)
        machine.transition(SagaStatus.EXECUTING)

        # Both branches start together; neither waits for nor cancels the other
        reservations, (recording,) = await asyncio.gather(
            self._reserve_all(targets),
            self._run_stage(
                [
                    FanOutCall(
                        key="order",
                        operation="record",
                        call=partial(self.recorder.record, lines),
                        timeout=self.config.record_timeout,
                    )
                ]
            ),
        )

        return self._evaluate_execution(saga_id, machine, reservations, recording)

    async def _check_all(self, targets: tuple[OrderLine, ...]) -> list[OperationOutcome]:
        return await self._run_stage(
            [
                FanOutCall(
                    key=line.item_id,
                    operation="check",
                    call=partial(self.checker.check, line.item_id, line.quantity),
                    timeout=self.config.check_timeout,
                )
                for line in targets
            ]
        )

    async def _reserve_all(self, targets: tuple[OrderLine, ...]) -> list[OperationOutcome]:
        return await self._run_stage(
            [
                FanOutCall(
                    key=line.item_id,
                    operation="reserve",
                    call=partial(self.executor.reserve, line.item_id, line.quantity),
                    timeout=self.config.reserve_timeout,
                )
                for line in targets
            ]
        )

    async def _run_stage(self, calls: list[FanOutCall]) -> list[OperationOutcome]:
        outcomes = await self.strategy.execute_parallel_steps(calls)
        if self.metrics:
            for call, outcome in zip(calls, outcomes, strict=True):
                self.metrics.record_operation(
                    self.saga_name, call.operation, outcome.status, outcome.duration
                )
        return outcomes

    # ------------------------------------------------------------------
    # Transition rules
    # ------------------------------------------------------------------

    def _evaluate_checks(
        self, saga_id: str, checks: list[OperationOutcome]
    ) -> tuple[list[str], dict[str, Exception]]:
        """
        Split check outcomes into real shortfalls and transient failures.

        Out of stock and unknown items are shortfalls. Store outages and
        timeouts are transient. Any other error is treated as transient too,
        since it says nothing about stock.
        """
        shortfalls: list[str] = []
        transient: dict[str, Exception] = {}

        for outcome in checks:
            if outcome.succeeded:
                result: CheckResult = outcome.value
                if not result.in_stock:
                    self._note_check_failure(saga_id, outcome.key, "insufficient stock")
                    shortfalls.append(outcome.key)
            elif isinstance(outcome.error, NotFoundError):
                self._note_check_failure(saga_id, outcome.key, "item not found")
                shortfalls.append(outcome.key)
            else:
                if self._log:
                    self._log.operation_failed(saga_id, "check", outcome.key, outcome.error)
                transient[outcome.key] = outcome.error  # type: ignore[assignment]

        # Duplicate lines may repeat an id when merging is disabled
        return list(dict.fromkeys(shortfalls)), transient

    def _note_check_failure(self, saga_id: str, item_id: str, reason: str) -> None:
        if self._log:
            self._log.check_failed(saga_id, item_id, reason)

    def _evaluate_execution(
        self,
        saga_id: str,
        machine: SagaStateMachine,
        reservations: list[OperationOutcome],
        recording: OperationOutcome,
    ) -> SagaOutcome:
        detail = PartialFailureDetail()

        for outcome in reservations:
            if outcome.succeeded:
                detail.reserved.setdefault(outcome.key, []).append(outcome.value.new_stock)
                detail.reserved_quantities[outcome.key] = (
                    detail.reserved_quantities.get(outcome.key, 0) + outcome.value.quantity
                )
            else:
                if self._log:
                    self._log.operation_failed(saga_id, "reserve", outcome.key, outcome.error)
                # Unmerged duplicate lines can fail more than once per item
                errors = detail.failed_reservations.setdefault(outcome.key, [])
                errors.append(outcome.error)  # type: ignore[arg-type]

        if recording.succeeded:
            detail.order_recorded = True
            detail.order_id = recording.value.order_id
        else:
            if self._log:
                self._log.operation_failed(saga_id, "record", recording.key, recording.error)
            detail.order_error = recording.error

        if detail.failed_branches:
            machine.transition(SagaStatus.PARTIALLY_FAILED)
            return PartialFailure(saga_id=saga_id, status=machine.status, detail=detail)

        machine.transition(SagaStatus.COMMITTED)
        return Committed(
            saga_id=saga_id,
            status=machine.status,
            order_id=detail.order_id or "",
            reservations=[outcome.value for outcome in reservations],
        )

    def _on_transition(self, saga_id: str, old_status: SagaStatus, new_status: SagaStatus) -> None:
        logger.debug(f"Saga {saga_id}: {old_status.value} -> {new_status.value}")
        if self._log:
            self._log.stage_entered(saga_id, self.saga_name, new_status)
