import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from kinship.identity.repository.contacts import ContactStore  # noqa: E402
from kinship.identity.repository.memory import InMemoryContactStore  # noqa: E402

BASE_TIME = datetime(2024, 4, 1, 12, 0, tzinfo=UTC)


class TickingClock:
    """Returns a strictly increasing timestamp on every call."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


class RecordingStore(ContactStore):
    """Delegates to another store while recording every call."""

    MUTATIONS = {"create_contact", "update_contact", "update_contacts_by_linked_id"}

    def __init__(self, inner: ContactStore) -> None:
        self.inner = inner
        self.calls: list[tuple] = []

    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in self.MUTATIONS]

    def find_by_email_or_phone(self, email, phone_number):
        self.calls.append(("find_by_email_or_phone", email, phone_number))
        return self.inner.find_by_email_or_phone(email, phone_number)

    def find_by_linked_id_in_or_id_in(self, ids):
        ids = set(ids)
        self.calls.append(("find_by_linked_id_in_or_id_in", frozenset(ids)))
        return self.inner.find_by_linked_id_in_or_id_in(ids)

    def create_contact(self, email, phone_number, precedence, linked_id=None):
        self.calls.append(("create_contact", email, phone_number, precedence, linked_id))
        return self.inner.create_contact(email, phone_number, precedence, linked_id)

    def update_contact(self, contact_id, precedence, linked_id):
        self.calls.append(("update_contact", contact_id, precedence, linked_id))
        return self.inner.update_contact(contact_id, precedence, linked_id)

    def update_contacts_by_linked_id(self, old_linked_id, new_linked_id):
        self.calls.append(("update_contacts_by_linked_id", old_linked_id, new_linked_id))
        return self.inner.update_contacts_by_linked_id(old_linked_id, new_linked_id)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def memory_store(clock) -> InMemoryContactStore:
    return InMemoryContactStore(clock=clock)


@pytest.fixture
def recording_store(memory_store) -> RecordingStore:
    return RecordingStore(memory_store)
