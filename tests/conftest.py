"""Root conftest: in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.models.transaction import Transaction, TransactionKind

# Matches Alembic head: 3f9a1c2b7d40 (initial schema)
SCHEMA_DDL = """
CREATE TABLE invoices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    serial_no VARCHAR(32) NOT NULL UNIQUE,
    customer_name TEXT NOT NULL,
    customer_address TEXT NOT NULL DEFAULT '',
    customer_mobile TEXT NOT NULL DEFAULT '',
    memo_date TEXT NOT NULL,
    grand_total NUMERIC(12, 2) NOT NULL DEFAULT 0,
    advance NUMERIC(12, 2) NOT NULL DEFAULT 0,
    due NUMERIC(12, 2) NOT NULL DEFAULT 0,
    is_paid BOOLEAN NOT NULL DEFAULT 0,
    in_word TEXT NOT NULL DEFAULT '',
    is_walk_in BOOLEAN NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE invoice_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    invoice_id INTEGER NOT NULL REFERENCES invoices(id) ON DELETE CASCADE,
    description TEXT NOT NULL DEFAULT '',
    length NUMERIC(12, 3),
    width NUMERIC(12, 3),
    quantity NUMERIC(12, 3) NOT NULL DEFAULT 1,
    rate NUMERIC(12, 2) NOT NULL DEFAULT 0,
    total NUMERIC(12, 2) NOT NULL DEFAULT 0,
    total_overridden BOOLEAN NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    name TEXT NOT NULL UNIQUE,
    address TEXT NOT NULL DEFAULT '',
    mobile TEXT NOT NULL DEFAULT '',
    opening_balance NUMERIC(12, 2) NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    customer_name TEXT NOT NULL,
    date TEXT NOT NULL,
    description TEXT NOT NULL,
    amount NUMERIC(12, 2) NOT NULL,
    kind VARCHAR(16) NOT NULL,
    created_at DATETIME NOT NULL
);

CREATE TABLE pending_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_name TEXT NOT NULL,
    description TEXT NOT NULL,
    quantity NUMERIC(12, 3) NOT NULL DEFAULT 1,
    rate NUMERIC(12, 2) NOT NULL DEFAULT 0,
    total NUMERIC(12, 2) NOT NULL,
    created_at DATETIME NOT NULL
);

CREATE TABLE activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_name TEXT NOT NULL,
    date TEXT NOT NULL,
    activity_type VARCHAR(32) NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    amount NUMERIC(12, 2) NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL
);

CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email VARCHAR(255) NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_invoice(**overrides) -> Invoice:
    defaults = dict(
        serial_no="10001",
        customer_name="Karim Traders",
        customer_address="Sakhipur",
        customer_mobile="01711000000",
        memo_date=date(2025, 3, 7),
        items=[
            InvoiceItem(
                description="Visiting Card",
                quantity=Decimal("2"),
                rate=Decimal("350"),
                total=Decimal("700.00"),
                sort_order=0,
            ),
            InvoiceItem(
                description="PVC Banner",
                length=Decimal("5"),
                width=Decimal("3"),
                quantity=Decimal("1"),
                rate=Decimal("20"),
                total=Decimal("300.00"),
                sort_order=1,
            ),
        ],
        grand_total=Decimal("1000.00"),
        advance=Decimal("300.00"),
        due=Decimal("700.00"),
        is_paid=False,
        in_word="One Thousand Taka Only.",
    )
    defaults.update(overrides)
    return Invoice(**defaults)


def _sample_transaction(**overrides) -> Transaction:
    defaults = dict(
        customer_name="Karim Traders",
        date=date(2025, 3, 10),
        description="Cash received",
        amount=Decimal("200.00"),
        kind=TransactionKind.DEPOSIT,
    )
    defaults.update(overrides)
    return Transaction(**defaults)


@pytest.fixture()
def sample_invoice():
    return _sample_invoice


@pytest.fixture()
def sample_transaction():
    return _sample_transaction
