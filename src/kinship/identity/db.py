from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

import psycopg

from .config import get_settings
from .errors import StoreError

T = TypeVar("T")


@contextmanager
def get_connection(database_url: str | None = None) -> Iterator[psycopg.Connection[Any]]:
    url = database_url or get_settings().database_url
    try:
        conn = psycopg.connect(url)
    except psycopg.Error as exc:
        raise StoreError(f"could not connect to contact store: {exc}") from exc
    try:
        yield conn
    finally:
        conn.close()


def run_in_transaction(fn: Callable[[psycopg.Connection[Any]], T], database_url: str | None = None) -> T:
    with get_connection(database_url) as conn:
        try:
            with conn.transaction():
                return fn(conn)
        except psycopg.Error as exc:
            raise StoreError(f"contact store transaction failed: {exc}") from exc


__all__ = ["get_connection", "run_in_transaction"]
