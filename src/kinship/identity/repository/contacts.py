from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List

from ..models import Contact, LinkPrecedence


class ContactStore(ABC):
    """Storage interface consumed by the identity resolver."""

    @abstractmethod
    def find_by_email_or_phone(self, email: str | None, phone_number: str | None) -> List[Contact]:
        """Return contacts matching either supplied field, oldest first."""

    @abstractmethod
    def find_by_linked_id_in_or_id_in(self, ids: Iterable[int]) -> List[Contact]:
        """Return contacts whose id or linked_id is in ``ids``."""

    @abstractmethod
    def create_contact(
        self,
        email: str | None,
        phone_number: str | None,
        precedence: LinkPrecedence,
        linked_id: int | None = None,
    ) -> Contact:
        """Insert a contact, letting the store assign id and timestamps."""

    @abstractmethod
    def update_contact(self, contact_id: int, precedence: LinkPrecedence, linked_id: int | None) -> None:
        """Rewrite the link state of one contact."""

    @abstractmethod
    def update_contacts_by_linked_id(self, old_linked_id: int, new_linked_id: int) -> int:
        """Repoint every contact linked to ``old_linked_id``; returns rows changed."""


__all__ = ["ContactStore"]
