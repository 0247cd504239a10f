"""The three store operations driven by the reservation saga"""

from .checker import AvailabilityChecker
from .recorder import OrderRecorder
from .reservation import StockReservationExecutor
from .validation import merge_lines, parse_request

__all__ = [
    "AvailabilityChecker",
    "OrderRecorder",
    "StockReservationExecutor",
    "merge_lines",
    "parse_request",
]
