"""
Order Recorder

Writes one new order record per call. There is no idempotency key:
calling ``record`` twice with the same lines creates two orders, so
callers must not retry it blindly.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from stocksaga.core.ids import IdGenerator, generate_id
from stocksaga.core.logger import get_logger
from stocksaga.operations.validation import validate_lines
from stocksaga.storage.base import OrderStore
from stocksaga.types import OrderLine, RecordResult

logger = get_logger(__name__)


class OrderRecorder:
    """Append-only order writer"""

    def __init__(self, order_store: OrderStore, id_generator: IdGenerator = generate_id):
        self.order_store = order_store
        self.id_generator = id_generator

    async def record(self, lines: Iterable[OrderLine]) -> RecordResult:
        """
        Persist ``Order{id, lines, created_at=now}`` under a fresh id.

        Raises:
            ValidationError: If the lines are malformed
            StoreUnavailableError: On transient store errors
        """
        lines = validate_lines(lines)
        order_id = self.id_generator()
        created_at = datetime.now(UTC)

        await self.order_store.put(order_id, lines, created_at)
        logger.info(f"Order {order_id} recorded with {len(lines)} line(s)")
        return RecordResult(order_id=order_id, created_at=created_at)
