from __future__ import annotations


class IdentityError(Exception):
    """Base class for identity resolution failures."""


class ValidationError(IdentityError):
    """Raised when a request carries neither an email nor a phone number."""


class StoreError(IdentityError):
    """Raised when the contact store fails to read or write."""


__all__ = ["IdentityError", "StoreError", "ValidationError"]
