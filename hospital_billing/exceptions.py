"""Error taxonomy for the billing API.

Each error carries the HTTP status it is rendered with; the handlers in
``hospital_billing.main`` turn them into ``{"message": ...}`` bodies.
"""


class BillingError(Exception):
    """Base exception for billing operations."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    """Raised when input is malformed or breaks a business rule."""

    status_code = 400


class AuthenticationError(BillingError):
    """Raised when login credentials do not match a user."""

    status_code = 401


class NotFoundError(BillingError):
    """Raised when a referenced id does not exist."""

    status_code = 404


class ConflictError(BillingError):
    """Raised when a write would break a uniqueness rule."""

    status_code = 409


class PersistenceError(BillingError):
    """Raised when the store fails; the message never carries driver detail."""

    status_code = 500


__all__ = [
    "BillingError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "PersistenceError",
]
