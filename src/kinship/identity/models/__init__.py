from .contracts import (
    Contact,
    IdentifyRequest,
    IdentifyResponse,
    IdentitySummary,
    LinkPrecedence,
)

__all__ = [
    "Contact",
    "IdentifyRequest",
    "IdentifyResponse",
    "IdentitySummary",
    "LinkPrecedence",
]
