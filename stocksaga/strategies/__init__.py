"""
Fan-out/join strategies for saga stages
"""

from .base import FanOutCall, ParallelExecutionStrategy
from .wait_all import WaitAllStrategy

__all__ = [
    "FanOutCall",
    "ParallelExecutionStrategy",
    "WaitAllStrategy",
]
