"""
WAIT_ALL Strategy Implementation

Runs every call of a stage concurrently and waits for all of them to settle
before returning. A failing member never cancels its siblings, and the
stage never returns while one of its tasks is still running.
"""

import asyncio
import time

from stocksaga.core.exceptions import SagaTimeoutError
from stocksaga.core.logger import get_logger
from stocksaga.strategies.base import FanOutCall, ParallelExecutionStrategy
from stocksaga.types import OperationOutcome, OperationStatus

logger = get_logger(__name__)


class WaitAllStrategy(ParallelExecutionStrategy):
    """
    Implements the WAIT_ALL join barrier

    1. Start one task per call, each under its own timeout
    2. Let every task run to completion or failure
    3. Return one settled outcome per call; exceptions become FAILED or
       TIMED_OUT outcomes instead of propagating
    """

    async def execute_parallel_steps(self, calls: list[FanOutCall]) -> list[OperationOutcome]:
        if not calls:
            return []

        tasks = [asyncio.create_task(self._settle(call)) for call in calls]
        try:
            return list(await asyncio.gather(*tasks))
        except asyncio.CancelledError:
            self._cancel_all_tasks(tasks)
            # Owned tasks must finish before the stage unwinds
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _settle(self, call: FanOutCall) -> OperationOutcome:
        """Run one call and fold its result or error into an outcome."""
        started = time.perf_counter()
        try:
            value = await asyncio.wait_for(call.call(), timeout=call.timeout)
        except TimeoutError:
            error = SagaTimeoutError(call.operation, call.key, call.timeout)
            logger.warning(str(error))
            return OperationOutcome(
                key=call.key,
                status=OperationStatus.TIMED_OUT,
                error=error,
                duration=time.perf_counter() - started,
            )
        except Exception as e:
            return OperationOutcome(
                key=call.key,
                status=OperationStatus.FAILED,
                error=e,
                duration=time.perf_counter() - started,
            )
        return OperationOutcome(
            key=call.key,
            status=OperationStatus.SUCCEEDED,
            value=value,
            duration=time.perf_counter() - started,
        )

    def _cancel_all_tasks(self, tasks: list) -> None:
        """Cancel all incomplete tasks."""
        for task in tasks:
            if not task.done():
                task.cancel()

    def get_description(self) -> str:
        """Human-readable description of this strategy"""
        return "WAIT_ALL: Run every call to completion, then join"
