from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set

from shared.logging import bind_contact_context, clear_contact_context, get_logger

from ..errors import ValidationError
from ..models import Contact, IdentitySummary, LinkPrecedence
from ..repository.contacts import ContactStore
from .events import IdentityEventHook, LoggingEventHook

logger = get_logger("identity.resolver")


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


class IdentityResolver:
    """Consolidates (email, phone number) sightings into linked identity graphs.

    Each graph has exactly one primary contact (the oldest member) and any
    number of secondaries linked directly to it. ``identify`` matches the
    incoming fact against stored contacts, expands the matches to their full
    graphs, collapses multiple primaries into the oldest one, records the fact
    as a new secondary when it carries something the graph has not seen, and
    returns the consolidated view.
    """

    def __init__(self, store: ContactStore, hook: IdentityEventHook | None = None) -> None:
        self.store = store
        self.hook = hook or LoggingEventHook()

    @staticmethod
    def validate(email: str | None, phone_number: str | None) -> None:
        if not email and not phone_number:
            raise ValidationError("At least one of email or phoneNumber is required.")

    def identify(self, email: str | None = None, phone_number: str | None = None) -> IdentitySummary:
        self.validate(email, phone_number)
        email = email or None
        phone_number = phone_number or None
        clear_contact_context()

        self._emit("identify_started", email=email, phone_number=phone_number)

        matches = self.store.find_by_email_or_phone(email, phone_number)
        self._emit("contacts_matched", contact_ids=[c.id for c in matches])
        if not matches:
            contact = self.store.create_contact(email, phone_number, LinkPrecedence.PRIMARY)
            bind_contact_context(contact_id=contact.id, primary_contact_id=contact.id)
            self._emit("primary_created", contact_id=contact.id)
            return self._complete(contact, [contact])

        graph = self._expand(matches)
        oldest = min(graph, key=Contact.sort_key)
        primaries = [c for c in graph if c.is_primary]
        bind_contact_context(primary_contact_id=oldest.id)
        self._emit(
            "graph_expanded",
            primary_contact_id=oldest.id,
            contact_ids=[c.id for c in graph],
            primary_ids=[c.id for c in primaries],
        )

        if self._reconcile(oldest, primaries, graph):
            graph = self._expand([oldest])
            oldest = next(c for c in graph if c.id == oldest.id)

        known_emails = _distinct(c.email for c in graph)
        known_phones = _distinct(c.phone_number for c in graph)
        if (email and email not in known_emails) or (phone_number and phone_number not in known_phones):
            created = self.store.create_contact(email, phone_number, LinkPrecedence.SECONDARY, oldest.id)
            bind_contact_context(contact_id=created.id, primary_contact_id=oldest.id)
            self._emit("secondary_created", contact_id=created.id, primary_contact_id=oldest.id)
            graph.append(created)

        return self._complete(oldest, graph)

    def _expand(self, seeds: Sequence[Contact]) -> List[Contact]:
        """Collect the connected component reachable over linked_id in either direction."""
        collected: Dict[int, Contact] = {c.id: c for c in seeds}
        queried: Set[int] = set()
        frontier = list(collected.values())
        while frontier:
            ids = {c.id for c in frontier}
            ids.update(c.linked_id for c in frontier if c.linked_id is not None)
            ids -= queried
            if not ids:
                break
            queried |= ids
            fetched = self.store.find_by_linked_id_in_or_id_in(ids)
            frontier = []
            for contact in fetched:
                is_new = contact.id not in collected
                collected[contact.id] = contact
                if is_new:
                    frontier.append(contact)
        return sorted(collected.values(), key=Contact.sort_key)

    def _reconcile(self, oldest: Contact, primaries: Sequence[Contact], graph: Sequence[Contact]) -> bool:
        """Demote extra primaries and flatten links onto ``oldest``; True if anything changed."""
        changed = False
        demoted: List[int] = []
        if len(primaries) > 1:
            for primary in primaries:
                if primary.id == oldest.id:
                    continue
                self.store.update_contact(primary.id, LinkPrecedence.SECONDARY, oldest.id)
                self.store.update_contacts_by_linked_id(primary.id, oldest.id)
                demoted.append(primary.id)
            changed = bool(demoted)
            self._emit("primaries_merged", primary_contact_id=oldest.id, demoted_ids=demoted)

        if not oldest.is_primary:
            return changed

        # stale links left behind by interleaved writers
        handled = set(demoted)
        for contact in graph:
            if contact.id == oldest.id or contact.id in handled or contact.is_primary:
                continue
            if contact.linked_id in handled or contact.linked_id == oldest.id:
                continue
            self.store.update_contact(contact.id, LinkPrecedence.SECONDARY, oldest.id)
            self._emit("contact_relinked", contact_id=contact.id, previous_linked_id=contact.linked_id)
            changed = True
        return changed

    def _complete(self, primary: Contact, graph: Sequence[Contact]) -> IdentitySummary:
        summary = IdentitySummary(
            primary_contact_id=primary.id,
            emails=_distinct([primary.email, *(c.email for c in graph)]),
            phone_numbers=_distinct([primary.phone_number, *(c.phone_number for c in graph)]),
            secondary_contact_ids=[c.id for c in graph if not c.is_primary and c.id != primary.id],
        )
        self._emit(
            "identify_completed",
            primary_contact_id=summary.primary_contact_id,
            secondary_count=len(summary.secondary_contact_ids),
        )
        return summary

    def _emit(self, event: str, **payload) -> None:
        try:
            self.hook(event, **payload)
        except Exception:
            logger.exception("event_hook_failed", hook_event=event)


__all__ = ["IdentityResolver"]
