from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import idna
import phonenumbers


class IdentifierKind(str, Enum):
    PHONE = "phone"
    EMAIL = "email"


@dataclass(slots=True)
class NormalizedIdentifier:
    kind: IdentifierKind
    value_raw: str
    value_canonical: str


def normalize_phone(value: str, default_region: str | None = None) -> str:
    cleaned = value.strip()
    try:
        parsed = phonenumbers.parse(cleaned, default_region or None)
    except phonenumbers.NumberParseException as exc:
        raise ValueError(f"Invalid phone number: {value}") from exc
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError(f"Invalid phone number: {value}")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def normalize_email(value: str) -> str:
    cleaned = value.strip()
    if "@" not in cleaned:
        raise ValueError(f"Invalid email address: {value}")
    local, domain = cleaned.split("@", 1)
    try:
        ascii_domain = idna.encode(domain.strip().lower()).decode("ascii")
    except idna.IDNAError as exc:
        raise ValueError(f"Invalid email address: {value}") from exc
    return f"{local.strip().lower()}@{ascii_domain}"


def normalize_identifier(
    kind: IdentifierKind,
    value: str,
    *,
    default_region: str | None = None,
) -> NormalizedIdentifier:
    candidate = value.strip()
    if kind == IdentifierKind.PHONE:
        canonical = normalize_phone(candidate, default_region=default_region)
    else:
        canonical = normalize_email(candidate)
    return NormalizedIdentifier(kind=kind, value_raw=candidate, value_canonical=canonical)


__all__ = [
    "IdentifierKind",
    "NormalizedIdentifier",
    "normalize_email",
    "normalize_identifier",
    "normalize_phone",
]
