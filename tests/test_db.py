from __future__ import annotations

from contextlib import contextmanager

import psycopg
import pytest

import kinship.identity.db as db_module
from kinship.identity.errors import StoreError


class DummyConn:
    def __init__(self, fail_on_commit: bool = False):
        self.closed = False
        self.transactions = 0
        self.fail_on_commit = fail_on_commit

    @contextmanager
    def transaction(self):
        self.transactions += 1
        yield
        if self.fail_on_commit:
            raise psycopg.errors.SerializationFailure("could not serialize access")

    def close(self):
        self.closed = True


def test_run_in_transaction_returns_result_and_closes(monkeypatch):
    conn = DummyConn()
    captured = {}

    def fake_connect(url):
        captured["url"] = url
        return conn

    monkeypatch.setattr(db_module.psycopg, "connect", fake_connect)

    result = db_module.run_in_transaction(lambda c: c is conn, "postgresql://db/contacts")

    assert result is True
    assert captured["url"] == "postgresql://db/contacts"
    assert conn.transactions == 1
    assert conn.closed is True


def test_run_in_transaction_wraps_driver_errors(monkeypatch):
    conn = DummyConn(fail_on_commit=True)
    monkeypatch.setattr(db_module.psycopg, "connect", lambda url: conn)

    with pytest.raises(StoreError, match="could not serialize"):
        db_module.run_in_transaction(lambda c: None, "postgresql://db/contacts")
    assert conn.closed is True


def test_connection_failure_becomes_store_error(monkeypatch):
    def refuse(url):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(db_module.psycopg, "connect", refuse)

    with pytest.raises(StoreError, match="could not connect"):
        with db_module.get_connection("postgresql://db/contacts"):
            pass
