from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime
from itertools import count
from typing import Callable, Dict, Iterable, List

from ..errors import StoreError
from ..models import Contact, LinkPrecedence
from .contacts import ContactStore


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryContactStore(ContactStore):
    """Process-local contact store used for development and tests.

    Rows are copied on the way in and out so callers never alias stored state.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow
        self._rows: Dict[int, Contact] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def load(self, contacts: Iterable[Contact]) -> None:
        """Seed rows verbatim, including arbitrary link states."""
        with self._lock:
            for contact in contacts:
                self._rows[contact.id] = replace(contact)
            next_id = max(self._rows, default=0) + 1
            self._ids = count(next_id)

    def all(self) -> List[Contact]:
        with self._lock:
            return [replace(row) for row in sorted(self._rows.values(), key=Contact.sort_key)]

    def get(self, contact_id: int) -> Contact | None:
        with self._lock:
            row = self._rows.get(contact_id)
            return replace(row) if row else None

    def _select(self, predicate: Callable[[Contact], bool]) -> List[Contact]:
        with self._lock:
            rows = [row for row in self._rows.values() if row.deleted_at is None and predicate(row)]
            return [replace(row) for row in sorted(rows, key=Contact.sort_key)]

    def find_by_email_or_phone(self, email: str | None, phone_number: str | None) -> List[Contact]:
        if not email and not phone_number:
            return []
        return self._select(
            lambda row: bool(email and row.email == email)
            or bool(phone_number and row.phone_number == phone_number)
        )

    def find_by_linked_id_in_or_id_in(self, ids: Iterable[int]) -> List[Contact]:
        wanted = set(ids)
        if not wanted:
            return []
        return self._select(lambda row: row.id in wanted or row.linked_id in wanted)

    def create_contact(
        self,
        email: str | None,
        phone_number: str | None,
        precedence: LinkPrecedence,
        linked_id: int | None = None,
    ) -> Contact:
        with self._lock:
            if linked_id is not None and linked_id not in self._rows:
                raise StoreError(f"linked contact {linked_id} does not exist")
            now = self._clock()
            contact = Contact(
                id=next(self._ids),
                email=email,
                phone_number=phone_number,
                link_precedence=precedence,
                linked_id=linked_id,
                created_at=now,
                updated_at=now,
            )
            self._rows[contact.id] = contact
            return replace(contact)

    def update_contact(self, contact_id: int, precedence: LinkPrecedence, linked_id: int | None) -> None:
        with self._lock:
            row = self._rows.get(contact_id)
            if row is None:
                raise StoreError(f"Contact not found for id={contact_id}")
            row.link_precedence = precedence
            row.linked_id = linked_id
            row.updated_at = self._clock()

    def update_contacts_by_linked_id(self, old_linked_id: int, new_linked_id: int) -> int:
        with self._lock:
            now = self._clock()
            changed = 0
            for row in self._rows.values():
                if row.linked_id == old_linked_id:
                    row.linked_id = new_linked_id
                    row.updated_at = now
                    changed += 1
            return changed


__all__ = ["InMemoryContactStore"]
