"""
Base classes for fan-out execution strategies

Defines the interface for dispatching a stage's store calls concurrently
and joining them into per-call outcomes.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from stocksaga.types import OperationOutcome


@dataclass(frozen=True)
class FanOutCall:
    """
    One member of a fan-out.

    Attributes:
        key: Identifies the member in the joined outcomes (usually the item id)
        operation: Operation name used in logs and timeout errors
        call: Zero-argument factory returning the awaitable to run
        timeout: Operation-local timeout in seconds
    """

    key: str
    operation: str
    call: Callable[[], Awaitable[Any]]
    timeout: float


class ParallelExecutionStrategy(ABC):
    """
    Base class for fan-out execution strategies

    Defines how a stage's calls are run and how their results are collected.
    """

    @abstractmethod
    async def execute_parallel_steps(self, calls: list[FanOutCall]) -> list[OperationOutcome]:
        """
        Execute calls concurrently according to the strategy

        Args:
            calls: Calls to dispatch

        Returns:
            One outcome per call, in the order the calls were given
        """
        raise NotImplementedError("Subclasses must implement execute_parallel_steps")
