from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..models import IdentifyResponse, IdentitySummary


class IdentityServiceClient:
    """Lightweight SDK for the Identity Service."""

    def __init__(self, base_url: str, auth_token: str | None = None, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    @staticmethod
    def _payload(email: Optional[str], phone_number: Optional[str]) -> Dict[str, Any]:
        return {"email": email, "phoneNumber": phone_number}

    def identify(self, email: str | None = None, phone_number: str | None = None) -> IdentitySummary:
        response = httpx.post(
            f"{self._base_url}/identify",
            json=self._payload(email, phone_number),
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()
        return IdentifyResponse.model_validate(response.json()).contact

    async def aidentify(self, email: str | None = None, phone_number: str | None = None) -> IdentitySummary:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                f"{self._base_url}/identify",
                json=self._payload(email, phone_number),
                headers=self._headers(),
            )
        response.raise_for_status()
        return IdentifyResponse.model_validate(response.json()).contact


__all__ = ["IdentityServiceClient"]
