"""
Saga State Machine - Manages the lifecycle of one reservation saga run.

State Diagram:

    ┌──────┐
    │ INIT │
    └──┬───┘
       │ validated
       ▼
  ┌──────────┐
  │ CHECKING │ ──────────────┬──────────────────┐
  └────┬─────┘               │                  │
       │ all in stock        │ shortfall or     │ transient
       ▼                     │ unknown item     │ failure only
 ┌─────────────┐             ▼                  ▼
 │ ALL_CHECKED │      ┌──────────────┐   ┌───────────────┐
 └──────┬──────┘      │ CHECK_FAILED │   │ INDETERMINATE │
        │             └──────────────┘   └───────────────┘
        ▼
  ┌───────────┐
  │ EXECUTING │ ───────────────┐
  └─────┬─────┘                │ a branch failed
        │ both branches ok     ▼
        ▼              ┌──────────────────┐
  ┌───────────┐        │ PARTIALLY_FAILED │
  │ COMMITTED │        └──────────────────┘
  └───────────┘
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from stocksaga.core.exceptions import InvalidStateTransitionError
from stocksaga.types import SagaStatus


class SagaStateMachine:
    """
    State machine for one saga run.

    Keeps the current status and the timestamped transition history, and
    rejects transitions outside ``VALID_TRANSITIONS``.

    Usage:
        >>> sm = SagaStateMachine("saga-1")
        >>> sm.transition(SagaStatus.CHECKING)
        >>> sm.transition(SagaStatus.ALL_CHECKED)
        >>> sm.is_terminal
        False
    """

    # Valid transitions: from_status -> [to_status, ...]
    VALID_TRANSITIONS = {
        SagaStatus.INIT: [SagaStatus.CHECKING],
        SagaStatus.CHECKING: [
            SagaStatus.ALL_CHECKED,
            SagaStatus.CHECK_FAILED,
            SagaStatus.INDETERMINATE,
        ],
        SagaStatus.ALL_CHECKED: [SagaStatus.EXECUTING],
        SagaStatus.EXECUTING: [SagaStatus.COMMITTED, SagaStatus.PARTIALLY_FAILED],
        SagaStatus.CHECK_FAILED: [],  # Terminal state
        SagaStatus.INDETERMINATE: [],  # Terminal state
        SagaStatus.COMMITTED: [],  # Terminal state
        SagaStatus.PARTIALLY_FAILED: [],  # Terminal state
    }

    def __init__(
        self,
        saga_id: str,
        on_transition: Callable[[str, SagaStatus, SagaStatus], Any] | None = None,
    ):
        """
        Args:
            saga_id: Id of the run this machine tracks
            on_transition: Optional callback ``(saga_id, old, new)`` after each transition
        """
        self.saga_id = saga_id
        self.status = SagaStatus.INIT
        self.history: list[tuple[SagaStatus, datetime]] = [(SagaStatus.INIT, datetime.now(UTC))]
        self._on_transition = on_transition

    def can_transition(self, target_status: SagaStatus) -> bool:
        return target_status in self.VALID_TRANSITIONS.get(self.status, [])

    def transition(self, target_status: SagaStatus) -> SagaStatus:
        """Move to ``target_status`` or raise InvalidStateTransitionError."""
        if not self.can_transition(target_status):
            raise InvalidStateTransitionError(self.saga_id, self.status, target_status)

        old_status = self.status
        self.status = target_status
        self.history.append((target_status, datetime.now(UTC)))

        if self._on_transition:
            self._on_transition(self.saga_id, old_status, target_status)

        return target_status

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def path(self) -> list[SagaStatus]:
        """Statuses visited so far, in order."""
        return [status for status, _ in self.history]
