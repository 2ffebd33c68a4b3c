from __future__ import annotations

from typing import Any, Dict, Iterable, List

import psycopg
from psycopg import Connection
from psycopg.rows import dict_row

from shared.logging import get_logger

from ..errors import StoreError
from ..models import Contact, LinkPrecedence
from .contacts import ContactStore

logger = get_logger("identity.repository.postgres")

CONTACTS_DDL = """
CREATE TABLE IF NOT EXISTS contacts (
    id BIGSERIAL PRIMARY KEY,
    phone_number TEXT,
    email TEXT,
    linked_id BIGINT REFERENCES contacts (id),
    link_precedence TEXT NOT NULL CHECK (link_precedence IN ('primary', 'secondary')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
    deleted_at TIMESTAMPTZ
);
CREATE INDEX IF NOT EXISTS contacts_email_idx ON contacts (email);
CREATE INDEX IF NOT EXISTS contacts_phone_number_idx ON contacts (phone_number);
CREATE INDEX IF NOT EXISTS contacts_linked_id_idx ON contacts (linked_id);
"""

_COLUMNS = "id, email, phone_number, link_precedence, linked_id, created_at, updated_at, deleted_at"


def _contact_from_row(row: Dict[str, Any]) -> Contact:
    return Contact(
        id=row["id"],
        email=row["email"],
        phone_number=row["phone_number"],
        link_precedence=LinkPrecedence(row["link_precedence"]),
        linked_id=row["linked_id"],
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
        deleted_at=row.get("deleted_at"),
    )


class PostgresContactStore(ContactStore):
    """psycopg-backed contact store operating on a caller-owned connection."""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def _fetch(self, query: str, params: Any) -> List[Contact]:
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                return [_contact_from_row(row) for row in cur.fetchall()]
        except psycopg.Error as exc:
            logger.error("contact_query_failed", error=str(exc))
            raise StoreError(f"contact query failed: {exc}") from exc

    def find_by_email_or_phone(self, email: str | None, phone_number: str | None) -> List[Contact]:
        clauses: List[str] = []
        params: List[Any] = []
        if email:
            clauses.append("email = %s")
            params.append(email)
        if phone_number:
            clauses.append("phone_number = %s")
            params.append(phone_number)
        if not clauses:
            return []
        return self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM contacts
            WHERE deleted_at IS NULL AND ({' OR '.join(clauses)})
            ORDER BY created_at ASC, id ASC
            """,
            params,
        )

    def find_by_linked_id_in_or_id_in(self, ids: Iterable[int]) -> List[Contact]:
        id_list = sorted(set(ids))
        if not id_list:
            return []
        return self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM contacts
            WHERE deleted_at IS NULL AND (linked_id = ANY(%s) OR id = ANY(%s))
            ORDER BY created_at ASC, id ASC
            """,
            (id_list, id_list),
        )

    def create_contact(
        self,
        email: str | None,
        phone_number: str | None,
        precedence: LinkPrecedence,
        linked_id: int | None = None,
    ) -> Contact:
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO contacts (email, phone_number, link_precedence, linked_id)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (email, phone_number, precedence.value, linked_id),
                )
                row = cur.fetchone()
        except psycopg.Error as exc:
            logger.error("contact_insert_failed", error=str(exc))
            raise StoreError(f"contact insert failed: {exc}") from exc
        if row is None:
            raise StoreError("contact insert returned no row")
        return _contact_from_row(row)

    def update_contact(self, contact_id: int, precedence: LinkPrecedence, linked_id: int | None) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE contacts
                    SET link_precedence = %s,
                        linked_id = %s,
                        updated_at = clock_timestamp()
                    WHERE id = %s
                    """,
                    (precedence.value, linked_id, contact_id),
                )
                updated = cur.rowcount
        except psycopg.Error as exc:
            logger.error("contact_update_failed", contact_id=contact_id, error=str(exc))
            raise StoreError(f"contact update failed: {exc}") from exc
        if updated == 0:
            raise StoreError(f"Contact not found for id={contact_id}")

    def update_contacts_by_linked_id(self, old_linked_id: int, new_linked_id: int) -> int:
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE contacts
                    SET linked_id = %s,
                        updated_at = clock_timestamp()
                    WHERE linked_id = %s
                    """,
                    (new_linked_id, old_linked_id),
                )
                return cur.rowcount or 0
        except psycopg.Error as exc:
            logger.error("contact_repoint_failed", old_linked_id=old_linked_id, error=str(exc))
            raise StoreError(f"contact repoint failed: {exc}") from exc

    def ensure_schema(self) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(CONTACTS_DDL)
        except psycopg.Error as exc:
            raise StoreError(f"could not create contacts table: {exc}") from exc


__all__ = ["CONTACTS_DDL", "PostgresContactStore"]
