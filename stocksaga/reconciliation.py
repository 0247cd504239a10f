"""
Reconciliation of partially failed saga runs.

The orchestrator never compensates. A caller holding a ``PartialFailure``
can hand it to ``SagaReconciler`` to release the reservations that were
applied. Orders have no deletion path, so a recorded order is only reported
as dangling for manual follow-up.

Example:
    >>> outcome = await saga.run(request)
    >>> if isinstance(outcome, PartialFailure):
    ...     report = await SagaReconciler(inventory, orders).reconcile(outcome)
    ...     if not report.success:
    ...         alert(report.release_errors)
"""

import asyncio
import time
from dataclasses import dataclass, field

from stocksaga.core.logger import get_logger
from stocksaga.storage.base import InventoryStore, OrderStore
from stocksaga.storage.core.errors import NotFoundError, StorageError
from stocksaga.types import PartialFailure

logger = get_logger(__name__)


@dataclass
class ReconciliationReport:
    """
    Result of reconciling one partially failed run.

    Attributes:
        saga_id: Run that was reconciled
        released: Item id -> stock level after the release
        release_errors: Item id -> error raised while releasing
        dangling_order_id: Order that was recorded for the failed run, if any
        dangling_order_found: Whether the dangling order could be read back
        dangling_order_error: Error raised while looking the dangling order up, if any
        execution_time_ms: Time spent reconciling
    """

    saga_id: str
    released: dict[str, int] = field(default_factory=dict)
    release_errors: dict[str, Exception] = field(default_factory=dict)
    dangling_order_id: str | None = None
    dangling_order_found: bool = False
    dangling_order_error: Exception | None = None
    execution_time_ms: float = 0.0

    @property
    def success(self) -> bool:
        """True when every applied reservation was released."""
        return not self.release_errors


class SagaReconciler:
    """
    Releases the reservations of a partially failed run.

    Releases run concurrently, one ``increment_by`` per reserved item. A
    failed release is collected in the report and never raised, so one bad
    item does not block the others.
    """

    def __init__(self, inventory_store: InventoryStore, order_store: OrderStore):
        self.inventory_store = inventory_store
        self.order_store = order_store

    async def reconcile(self, outcome: PartialFailure) -> ReconciliationReport:
        start_time = time.perf_counter()
        detail = outcome.detail
        report = ReconciliationReport(saga_id=outcome.saga_id)

        item_ids = list(detail.reserved_quantities)
        results = await asyncio.gather(
            *(
                self.inventory_store.increment_by(item_id, detail.reserved_quantities[item_id])
                for item_id in item_ids
            ),
            return_exceptions=True,
        )
        for item_id, result in zip(item_ids, results, strict=True):
            if isinstance(result, Exception):
                logger.error(f"Failed to release reservation for {item_id}: {result}")
                report.release_errors[item_id] = result
            else:
                report.released[item_id] = result

        if detail.order_id:
            report.dangling_order_id = detail.order_id
            await self._check_dangling_order(report, detail.order_id)
            logger.warning(
                f"Saga {outcome.saga_id} left order {detail.order_id} recorded; "
                "orders cannot be deleted"
            )

        report.execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Reconciled saga {outcome.saga_id}: released={len(report.released)} "
            f"errors={len(report.release_errors)}"
        )
        return report

    async def _check_dangling_order(self, report: ReconciliationReport, order_id: str) -> None:
        try:
            await self.order_store.get(order_id)
        except NotFoundError:
            report.dangling_order_found = False
        except StorageError as e:
            # releases are already applied here
            logger.error(f"Failed to look up dangling order {order_id}: {e}")
            report.dangling_order_error = e
        else:
            report.dangling_order_found = True
