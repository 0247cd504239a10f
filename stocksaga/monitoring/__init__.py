"""
Monitoring: structured logging and metrics for saga runs
"""

from .logging import SagaJsonFormatter, SagaLogger, saga_logger, setup_saga_logging
from .metrics import SagaMetrics

__all__ = [
    "SagaJsonFormatter",
    "SagaLogger",
    "SagaMetrics",
    "saga_logger",
    "setup_saga_logging",
]
