from __future__ import annotations

from functools import lru_cache
from typing import Callable, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from shared.contact_normalization import IdentifierKind, normalize_identifier
from shared.logging import get_logger

from ..config import IdentitySettings, get_settings
from ..db import run_in_transaction
from ..errors import StoreError, ValidationError
from ..models import IdentifyRequest, IdentifyResponse, IdentitySummary
from ..repository.memory import InMemoryContactStore
from ..repository.postgres import PostgresContactStore
from ..services.resolver import IdentityResolver

logger = get_logger("identity.routes")

router = APIRouter(tags=["identity"])

IdentifyHandler = Callable[[Optional[str], Optional[str]], IdentitySummary]


@lru_cache(maxsize=1)
def get_memory_store() -> InMemoryContactStore:
    return InMemoryContactStore()


def get_identify_handler(settings: IdentitySettings = Depends(get_settings)) -> IdentifyHandler:
    if settings.store_backend == "memory":
        return IdentityResolver(get_memory_store()).identify

    def _identify(email: Optional[str], phone_number: Optional[str]) -> IdentitySummary:
        IdentityResolver.validate(email, phone_number)
        return run_in_transaction(
            lambda conn: IdentityResolver(PostgresContactStore(conn)).identify(email, phone_number),
            settings.database_url,
        )

    return _identify


def _normalize(kind: IdentifierKind, value: Optional[str], settings: IdentitySettings) -> Optional[str]:
    if value is None:
        return None
    try:
        return normalize_identifier(kind, value, default_region=settings.default_region).value_canonical
    except ValueError as exc:
        logger.info(f"normalize_{kind.value}_failed", value=value, error=str(exc))
        return value


@router.post("/identify", response_model=IdentifyResponse)
def identify(
    request: IdentifyRequest,
    handler: IdentifyHandler = Depends(get_identify_handler),
    settings: IdentitySettings = Depends(get_settings),
):
    email = request.email
    phone_number = request.phone_number
    if settings.normalize_identifiers:
        email = _normalize(IdentifierKind.EMAIL, email, settings)
        phone_number = _normalize(IdentifierKind.PHONE, phone_number, settings)

    try:
        summary = handler(email, phone_number)
    except ValidationError as exc:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})
    except StoreError as exc:
        logger.exception("identify_store_failed", error=str(exc))
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": str(exc)})
    return IdentifyResponse(contact=summary)


__all__ = ["get_identify_handler", "get_memory_store", "router"]
