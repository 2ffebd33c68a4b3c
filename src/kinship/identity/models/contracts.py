from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LinkPrecedence(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(slots=True)
class Contact:
    """A single stored (email, phone number) sighting and its link state."""

    id: int
    email: str | None
    phone_number: str | None
    link_precedence: LinkPrecedence
    linked_id: int | None
    created_at: datetime
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_primary(self) -> bool:
        return self.link_precedence == LinkPrecedence.PRIMARY

    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)


class IdentifyRequest(BaseModel):
    """Body accepted by POST /identify."""

    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("email", "phone_number", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("must be a string")
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str):
            raise ValueError("must be a string")
        value = value.strip()
        return value or None


class IdentitySummary(BaseModel):
    """Consolidated view of one identity graph."""

    primary_contact_id: int = Field(alias="primaryContactId")
    emails: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list, alias="phoneNumbers")
    secondary_contact_ids: List[int] = Field(default_factory=list, alias="secondaryContactIds")

    model_config = ConfigDict(populate_by_name=True)


class IdentifyResponse(BaseModel):
    contact: IdentitySummary


__all__ = [
    "Contact",
    "IdentifyRequest",
    "IdentifyResponse",
    "IdentitySummary",
    "LinkPrecedence",
]
