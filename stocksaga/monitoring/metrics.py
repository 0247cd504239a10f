# ============================================
# FILE: stocksaga/monitoring/metrics.py
# ============================================

"""
In-process counters for reservation sagas, for hosts without Prometheus.
"""

from collections import Counter
from typing import Any

from stocksaga.types import OperationStatus, SagaStatus

_OUTCOME_KEYS = {
    SagaStatus.COMMITTED: "total_committed",
    SagaStatus.CHECK_FAILED: "total_insufficient_stock",
    SagaStatus.INDETERMINATE: "total_indeterminate",
    SagaStatus.PARTIALLY_FAILED: "total_partially_failed",
}


class SagaMetrics:
    """Outcome counts, per-operation call counts and mean run duration"""

    def __init__(self):
        self.outcomes: Counter[str] = Counter({key: 0 for key in _OUTCOME_KEYS.values()})
        self.operations: dict[str, Counter[str]] = {}
        self.executed = 0
        self.active = 0
        self._total_duration = 0.0

    def saga_started(self, saga_name: str) -> None:
        self.active += 1

    def saga_finished(self, saga_name: str) -> None:
        self.active -= 1

    def record_execution(self, saga_name: str, status: SagaStatus, duration: float) -> None:
        self.executed += 1
        self._total_duration += duration
        if status in _OUTCOME_KEYS:
            self.outcomes[_OUTCOME_KEYS[status]] += 1

    def record_operation(
        self, saga_name: str, operation: str, status: OperationStatus, duration: float
    ) -> None:
        calls = self.operations.get(operation)
        if calls is None:
            calls = self.operations[operation] = Counter({s.value: 0 for s in OperationStatus})
        calls["count"] += 1
        calls[status.value] += 1

    def get_metrics(self) -> dict[str, Any]:
        """Snapshot as a plain dict; ``commit_rate`` is a percentage string"""
        committed = self.outcomes["total_committed"]
        rate = committed / self.executed * 100 if self.executed else 0
        return {
            "total_executed": self.executed,
            **self.outcomes,
            "average_execution_time": self._total_duration / self.executed if self.executed else 0.0,
            "active": self.active,
            "operations": {
                name: {"count": calls["count"], **{s.value: calls[s.value] for s in OperationStatus}}
                for name, calls in self.operations.items()
            },
            "commit_rate": f"{rate:.2f}%",
        }
