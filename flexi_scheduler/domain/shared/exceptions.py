"""
Domain Exceptions

Error taxonomy for the scheduling core. Validation and precondition failures
are recoverable and leave state untouched; persistence failures are surfaced
to the caller without automatic retry; integrity violations are reported, not
raised.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    PRECONDITION = "precondition"
    NOT_FOUND = "not_found"
    CONCURRENCY = "concurrency"
    PERSISTENCE = "persistence"
    INVALID_ENTITY = "invalid_entity"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationFailure(DomainError):
    """Raised when a placement is rejected (compatibility, availability, overlap)."""

    def __init__(
        self,
        message: str,
        reasons: list[str],
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        super().__init__(message, ErrorType.VALIDATION, details)
        self.reasons = list(reasons)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["reasons"] = self.reasons
        return data


class PreconditionFailure(DomainError):
    """Raised when a command does not apply to the current state."""

    def __init__(
        self,
        message: str,
        details: dict[str, str | int | bool | None] | None = None,
        error_type: ErrorType = ErrorType.PRECONDITION,
    ) -> None:
        super().__init__(message, error_type, details)


class OrderNotFoundError(PreconditionFailure):
    """Raised when an order is not found in the catalog."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            f"Order not found: {order_id}",
            {"order_id": order_id, "entity_type": "order"},
            ErrorType.NOT_FOUND,
        )
        self.order_id = order_id


class MachineNotFoundError(PreconditionFailure):
    """Raised when a machine is not found in the catalog."""

    def __init__(self, machine_id: str) -> None:
        super().__init__(
            f"Machine not found: {machine_id}",
            {"machine_id": machine_id, "entity_type": "machine"},
            ErrorType.NOT_FOUND,
        )
        self.machine_id = machine_id


class OrderAlreadyScheduledError(PreconditionFailure):
    """Raised when scheduling an order that is already on the calendar."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            f"Order {order_id} is already scheduled", {"order_id": order_id}
        )
        self.order_id = order_id


class OrderNotScheduledError(PreconditionFailure):
    """Raised when unscheduling or moving an order that is not scheduled."""

    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(
            f"Order {order_id} is not scheduled (status: {status})",
            {"order_id": order_id, "status": status},
        )
        self.order_id = order_id
        self.status = status


class OperationInProgressError(PreconditionFailure):
    """Raised when a second mutation targets an order with one already in flight."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            f"Another operation is already in progress for order {order_id}",
            {"order_id": order_id},
            ErrorType.CONCURRENCY,
        )
        self.order_id = order_id


class OrderScheduledError(PreconditionFailure):
    """Raised when deleting an order that is still scheduled."""

    def __init__(self, order_id: str, odp_number: str | None = None) -> None:
        label = odp_number or order_id
        super().__init__(
            f"Order {label} is scheduled; unschedule it before deleting",
            {"order_id": order_id, "odp_number": odp_number},
        )
        self.order_id = order_id


class StaleOperationError(DomainError):
    """Raised when a mutation resolves after its generation was invalidated."""

    def __init__(self, order_id: str, generation: int, current: int) -> None:
        super().__init__(
            f"Discarded stale result for order {order_id} "
            f"(generation {generation}, current {current})",
            ErrorType.CONCURRENCY,
            {"order_id": order_id, "generation": generation, "current": current},
        )
        self.order_id = order_id


class PersistenceFailure(DomainError):
    """Raised when the persistence backend fails; the caller decides on retry."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        details = details or {}
        details["operation"] = operation
        super().__init__(message, ErrorType.PERSISTENCE, details)
        self.operation = operation


class CleanupInterruptedError(PersistenceFailure):
    """Raised when an integrity cleanup fails part-way; lists the orders cleared."""

    def __init__(
        self, failed_order_id: str, cleared_order_ids: list[str], cause: Exception
    ) -> None:
        super().__init__(
            f"Integrity cleanup stopped at order {failed_order_id}: {cause}",
            "integrity_cleanup",
            {
                "failed_order_id": failed_order_id,
                "cleared_order_ids": ", ".join(cleared_order_ids),
            },
        )
        self.failed_order_id = failed_order_id
        self.cleared_order_ids = list(cleared_order_ids)


class InvalidCatalogEntryError(DomainError):
    """Raised when a machine, order or availability entry breaks an invariant."""

    def __init__(self, entity_type: str, message: str) -> None:
        super().__init__(
            f"Invalid {entity_type}: {message}",
            ErrorType.INVALID_ENTITY,
            {"entity_type": entity_type},
        )
        self.entity_type = entity_type
