"""Store error hierarchy"""

from .errors import (
    DuplicateOrderError,
    InsufficientStockError,
    NotFoundError,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    "DuplicateOrderError",
    "InsufficientStockError",
    "NotFoundError",
    "StorageError",
    "StoreUnavailableError",
]
