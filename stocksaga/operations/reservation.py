"""
Stock Reservation Executor

Decrements stock for one item as a single atomic store update.

With an unconditional store the decrement is applied even if it drives
stock negative; the orchestrator must only reserve items whose check
passed, and concurrent saga runs can still over-commit. A store built with
``conditional_decrement=True`` rejects such a decrement with
``InsufficientStockError`` instead.
"""

from stocksaga.core.logger import get_logger
from stocksaga.operations.validation import validate_item_id, validate_quantity
from stocksaga.storage.base import InventoryStore
from stocksaga.types import ReservationResult

logger = get_logger(__name__)


class StockReservationExecutor:
    """Applies stock decrements through the inventory store's atomic primitive"""

    def __init__(self, inventory_store: InventoryStore):
        self.inventory_store = inventory_store

    async def reserve(self, item_id: str, quantity: int) -> ReservationResult:
        """
        Reserve ``quantity`` units of ``item_id``.

        Raises:
            ValidationError: If the item id or quantity is malformed
            NotFoundError: If the item disappeared since it was checked
            InsufficientStockError: Conditional stores only
            StoreUnavailableError: On transient store errors; safe to retry this item alone
        """
        validate_item_id(item_id)
        validate_quantity(quantity)

        logger.info(f"Updating stock for item {item_id}. Reducing by {quantity}")
        try:
            new_stock = await self.inventory_store.decrement_by(item_id, quantity)
        except Exception as e:
            logger.error(f"Failed to update stock for {item_id} (quantity={quantity}): {e}")
            raise

        if new_stock < 0:
            logger.warning(f"Stock for {item_id} is now negative ({new_stock})")
        return ReservationResult(item_id=item_id, quantity=quantity, new_stock=new_stock)
