"""
Availability Checker

Answers whether an item currently has enough stock for a requested quantity.
The answer is advisory: stock can change between this read and a later
reservation.
"""

from stocksaga.core.logger import get_logger
from stocksaga.operations.validation import validate_item_id, validate_quantity
from stocksaga.storage.base import InventoryStore
from stocksaga.types import CheckResult

logger = get_logger(__name__)


class AvailabilityChecker:
    """Read-only stock check against an inventory store"""

    def __init__(self, inventory_store: InventoryStore):
        self.inventory_store = inventory_store

    async def check(self, item_id: str, requested_qty: int) -> CheckResult:
        """
        Check stock for one line.

        Raises:
            ValidationError: If the item id or quantity is malformed
            NotFoundError: If the item does not exist
            StoreUnavailableError: On transient store errors
        """
        validate_item_id(item_id)
        validate_quantity(requested_qty)

        stock = await self.inventory_store.get(item_id)
        in_stock = stock >= requested_qty
        logger.debug(f"Checked {item_id}: stock={stock} requested={requested_qty} in_stock={in_stock}")
        return CheckResult(item_id=item_id, requested=requested_qty, in_stock=in_stock)
