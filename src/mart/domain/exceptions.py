"""Domain-level exceptions.

All business rule violations and remote failures are expressed as subclasses
of DomainException so the CLI layer can catch them uniformly and display
user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class PriceUnavailable(DomainException):
    """No active price tier or base price applies to the requested quantity."""


class BelowMinimumOrder(DomainException):
    """The requested quantity is under the minimum order quantity."""

    def __init__(self, requested: int, suggested: int) -> None:
        super().__init__(
            f"Quantity {requested} is below the minimum order quantity of {suggested}"
        )
        self.requested = requested
        self.suggested = suggested


class InvalidTransition(DomainException):
    """A quote status change that the lifecycle does not allow."""


class QuoteNotEditable(DomainException):
    """Line items were changed on a quote that is no longer a draft."""


class CompositionError(DomainException):
    """A single entity of a product composition could not be saved."""

    def __init__(self, entity_type: str, label: str, reason: str) -> None:
        super().__init__(f"{entity_type} '{label}': {reason}")
        self.entity_type = entity_type
        self.label = label
        self.reason = reason


class ProductCreationFailed(CompositionError):
    """The product record itself was rejected; nothing was persisted."""


class SubEntityCreationFailed(CompositionError):
    """A variant, image, specification or price tier was rejected."""


class Unauthorized(DomainException):
    """No bearer credential, or the backend refused the one supplied."""


class RemoteError(DomainException):
    """The backend answered but reported a failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteUnavailable(RemoteError):
    """The backend could not be reached or did not answer in time."""
