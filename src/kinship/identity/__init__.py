"""Contact identity reconciliation service."""

from .errors import IdentityError, StoreError, ValidationError
from .models import Contact, IdentitySummary, LinkPrecedence
from .services.resolver import IdentityResolver

__all__ = [
    "Contact",
    "IdentityError",
    "IdentityResolver",
    "IdentitySummary",
    "LinkPrecedence",
    "StoreError",
    "ValidationError",
]
