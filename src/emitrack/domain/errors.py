"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class UnauthorizedError(DomainError):
    """Caller is not authenticated or does not own the entity."""


class InvalidStateError(DomainError):
    """Operation not permitted given the entity's current status."""


class InternalError(DomainError):
    """Unexpected persistence or computation failure."""


def emi_not_found(emi_id: int) -> str:
    """Return message for missing EMI."""
    return f"EMI {emi_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def not_owner(entity: str, action: str = "access") -> str:
    """Return message when the requester does not own the entity."""
    return f"Not authorized to {action} this {entity}"


def inactive_emi(action: str) -> str:
    """Return message for an operation attempted on a non-active EMI."""
    return f"Cannot {action} for inactive EMI"


def invalid_choice(field: str, value: str, choices: list[str]) -> str:
    """Return message for a value outside an enumeration."""
    return f"Invalid {field} '{value}'. Must be one of: {', '.join(choices)}"
