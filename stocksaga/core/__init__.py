# ============================================
# FILE: stocksaga/core/__init__.py
# ============================================
"""
Core module for stocksaga - configuration, exceptions, logging and ids.
"""

from stocksaga.core.config import SagaConfig, configure, get_config
from stocksaga.core.exceptions import (
    EmptyOrderError,
    InvalidStateTransitionError,
    SagaError,
    SagaTimeoutError,
    ValidationError,
)
from stocksaga.core.ids import IdGenerator, generate_id
from stocksaga.core.logger import get_logger

__all__ = [
    "SagaConfig",
    "configure",
    "get_config",
    "SagaError",
    "ValidationError",
    "EmptyOrderError",
    "SagaTimeoutError",
    "InvalidStateTransitionError",
    "IdGenerator",
    "generate_id",
    "get_logger",
]
