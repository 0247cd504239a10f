# ============================================
# FILE: stocksaga/core/exceptions.py
# ============================================

"""
All saga-related exceptions
"""


class SagaError(Exception):
    """Base saga error"""


class ValidationError(SagaError):
    """
    Malformed saga request.

    Raised before any store call and never retried.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class EmptyOrderError(ValidationError):
    """Saga request has no lines"""

    def __init__(self, message: str = "Order must contain at least one line"):
        super().__init__(message, field="lines")


class SagaTimeoutError(SagaError):
    """A store call exceeded its operation-local timeout"""

    def __init__(self, operation: str, key: str, timeout: float):
        super().__init__(f"{operation} for {key!r} timed out after {timeout}s")
        self.operation = operation
        self.key = key
        self.timeout = timeout


class InvalidStateTransitionError(SagaError):
    """Raised when a saga run attempts a transition its state machine forbids"""

    def __init__(self, saga_id: str, from_status, to_status):
        self.saga_id = saga_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition for saga {saga_id}: {from_status.value} → {to_status.value}"
        )
