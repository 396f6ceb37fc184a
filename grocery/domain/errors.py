"""
Error hierarchy for the storefront core.

StoreError (base)
├── ConstraintViolation          rejected write, ``reason`` = constraint name
│   └── CheckoutError            checkout aborted (cart changed, denied item insert)
├── ReferentialIntegrityError    foreign key failure / product unavailable
├── TransientStorageError        connectivity problem, safe to retry
├── EmptyCartError
├── InvalidStatusTransition
└── AuthenticationError

Authorization denial is not part of the hierarchy: denied reads come back
empty and denied writes affect zero rows.
"""


class StoreError(Exception):
    """Base class for every failure surfaced by the core."""


class ConstraintViolation(StoreError):
    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or f"Constraint violated: {reason}")


class CheckoutError(ConstraintViolation):
    def __init__(self, reason: str, message: str | None = None):
        super().__init__(reason, message or f"Checkout aborted: {reason}")


class ReferentialIntegrityError(StoreError):
    def __init__(self, reason: str = "foreign_key", message: str | None = None):
        self.reason = reason
        super().__init__(message or f"Referenced row is missing: {reason}")


class TransientStorageError(StoreError):
    pass


class EmptyCartError(StoreError):
    def __init__(self):
        super().__init__("Cannot check out an empty cart")


class InvalidStatusTransition(StoreError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Order status cannot change from {current} to {requested}")


class AuthenticationError(StoreError):
    pass


class PolicyBypassError(RuntimeError):
    """Raised when code tries to write a policed table without going through the policy engine."""
