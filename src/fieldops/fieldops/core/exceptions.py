from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced project, person or record does not exist."""


class ConflictError(DomainError):
    """Raised when the request clashes with current state (roster, concurrent write)."""


class InvalidOperationError(DomainError):
    """Raised for actions the current state structurally forbids."""


class InvalidTransitionError(DomainError):
    """Raised when a status change is not an edge of the lifecycle graph."""

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition from {getattr(from_status, 'value', from_status)} "
            f"to {getattr(to_status, 'value', to_status)}"
        )
