from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError
from ulid import ULID

from cashmemo.constants import DHAKA_TZ
from cashmemo.models import to_money
from cashmemo.models.activity_log import ActivityLog
from cashmemo.models.customer import Customer, normalize_name
from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.models.pending_item import PendingItem
from cashmemo.models.transaction import Transaction, TransactionKind
from cashmemo.models.user import User
from cashmemo.repositories.base import (
    ActivityLogRepository,
    CustomerRepository,
    DuplicateSerialError,
    InvoiceRepository,
    PendingItemRepository,
    TransactionRepository,
    UserRepository,
)


def _now() -> datetime:
    return datetime.now(DHAKA_TZ)


def _num(value: Decimal | None) -> str | None:
    """Bind Decimals as strings; not every DBAPI driver adapts Decimal."""
    if value is None:
        return None
    return str(value)


def _dec(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def _iso(value: date) -> str:
    return value.isoformat()


def _serial_sort_key(invoice: Invoice) -> tuple[int, int, str]:
    try:
        return (1, int(invoice.serial_no), invoice.serial_no)
    except ValueError:
        return (0, 0, invoice.serial_no)


class SQLAlchemyInvoiceRepository(InvoiceRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def _invoice_params(self, invoice: Invoice) -> dict:
        return {
            "serial_no": invoice.serial_no,
            "customer_name": invoice.customer_name,
            "customer_address": invoice.customer_address,
            "customer_mobile": invoice.customer_mobile,
            "memo_date": _iso(invoice.memo_date),
            "grand_total": _num(invoice.grand_total),
            "advance": _num(invoice.advance),
            "due": _num(invoice.due),
            "is_paid": invoice.is_paid,
            "in_word": invoice.in_word,
            "is_walk_in": invoice.is_walk_in,
        }

    def _insert_items(self, invoice_id: int, items: list[InvoiceItem]) -> None:
        for i, item in enumerate(items):
            self.conn.execute(
                text(
                    "INSERT INTO invoice_items (invoice_id, description, length, width, quantity, rate, "
                    "total, total_overridden, sort_order) "
                    "VALUES (:invoice_id, :description, :length, :width, :quantity, :rate, "
                    ":total, :total_overridden, :sort_order)"
                ),
                {
                    "invoice_id": invoice_id,
                    "description": item.description,
                    "length": _num(item.length),
                    "width": _num(item.width),
                    "quantity": _num(item.quantity),
                    "rate": _num(item.rate),
                    "total": _num(item.total),
                    "total_overridden": item.total_overridden,
                    "sort_order": i,
                },
            )

    def create(self, invoice: Invoice) -> Invoice:
        if self._get_row(invoice.serial_no) is not None:
            raise DuplicateSerialError(invoice.serial_no)
        now = _now()
        params = self._invoice_params(invoice)
        params.update({"uuid": str(ULID()), "created_at": now, "updated_at": now})
        try:
            result = self.conn.execute(
                text(
                    "INSERT INTO invoices (uuid, serial_no, customer_name, customer_address, customer_mobile, "
                    "memo_date, grand_total, advance, due, is_paid, in_word, is_walk_in, created_at, updated_at) "
                    "VALUES (:uuid, :serial_no, :customer_name, :customer_address, :customer_mobile, "
                    ":memo_date, :grand_total, :advance, :due, :is_paid, :in_word, :is_walk_in, "
                    ":created_at, :updated_at)"
                ),
                params,
            )
        except IntegrityError as exc:
            self.conn.rollback()
            raise DuplicateSerialError(invoice.serial_no) from exc
        self._insert_items(result.lastrowid, invoice.items)
        self.conn.commit()
        created = self.get_by_serial(invoice.serial_no)
        if created is None:
            raise RuntimeError(f"Failed to retrieve invoice after create (serial={invoice.serial_no})")
        return created

    def upsert(self, invoice: Invoice) -> Invoice:
        row = self._get_row(invoice.serial_no)
        if row is None:
            return self.create(invoice)

        params = self._invoice_params(invoice)
        params["updated_at"] = _now()
        self.conn.execute(
            text(
                "UPDATE invoices SET customer_name = :customer_name, customer_address = :customer_address, "
                "customer_mobile = :customer_mobile, memo_date = :memo_date, grand_total = :grand_total, "
                "advance = :advance, due = :due, is_paid = :is_paid, in_word = :in_word, "
                "is_walk_in = :is_walk_in, updated_at = :updated_at WHERE serial_no = :serial_no"
            ),
            params,
        )
        self.conn.execute(
            text("DELETE FROM invoice_items WHERE invoice_id = :invoice_id"),
            {"invoice_id": row["id"]},
        )
        self._insert_items(row["id"], invoice.items)
        self.conn.commit()
        updated = self.get_by_serial(invoice.serial_no)
        if updated is None:
            raise RuntimeError(f"Failed to retrieve invoice after upsert (serial={invoice.serial_no})")
        return updated

    @staticmethod
    def _build_item(row: RowMapping) -> InvoiceItem:
        return InvoiceItem(
            id=row["id"],
            invoice_id=row["invoice_id"],
            description=row["description"],
            length=_dec(row["length"]),
            width=_dec(row["width"]),
            quantity=_dec(row["quantity"]),
            rate=_dec(row["rate"]),
            total=to_money(row["total"]),
            total_overridden=bool(row["total_overridden"]),
            sort_order=row["sort_order"],
        )

    @classmethod
    def _build_invoice(cls, row: RowMapping, item_rows: list[RowMapping]) -> Invoice:
        return Invoice(
            id=row["id"],
            uuid=row["uuid"],
            serial_no=row["serial_no"],
            customer_name=row["customer_name"],
            customer_address=row["customer_address"] or "",
            customer_mobile=row["customer_mobile"] or "",
            memo_date=row["memo_date"],
            items=[cls._build_item(item_row) for item_row in item_rows],
            grand_total=to_money(row["grand_total"]),
            advance=to_money(row["advance"]),
            due=to_money(row["due"]),
            is_paid=bool(row["is_paid"]),
            in_word=row["in_word"],
            is_walk_in=bool(row["is_walk_in"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _get_row(self, serial_no: str) -> RowMapping | None:
        return (
            self.conn.execute(
                text("SELECT * FROM invoices WHERE serial_no = :serial_no"),
                {"serial_no": str(serial_no)},
            )
            .mappings()
            .fetchone()
        )

    def get_by_serial(self, serial_no: str) -> Invoice | None:
        row = self._get_row(serial_no)
        if row is None:
            return None
        items = (
            self.conn.execute(
                text("SELECT * FROM invoice_items WHERE invoice_id = :invoice_id ORDER BY sort_order"),
                {"invoice_id": row["id"]},
            )
            .mappings()
            .fetchall()
        )
        return self._build_invoice(row, list(items))

    def list_all(self) -> list[Invoice]:
        rows = self.conn.execute(text("SELECT * FROM invoices")).mappings().fetchall()
        if not rows:
            return []
        all_items = (
            self.conn.execute(text("SELECT * FROM invoice_items ORDER BY invoice_id, sort_order"))
            .mappings()
            .fetchall()
        )
        items_by_invoice: dict[int, list[RowMapping]] = {}
        for item_row in all_items:
            items_by_invoice.setdefault(item_row["invoice_id"], []).append(item_row)
        invoices = [self._build_invoice(row, items_by_invoice.get(row["id"], [])) for row in rows]
        return sorted(invoices, key=_serial_sort_key, reverse=True)

    def list_serials(self) -> list[str]:
        rows = self.conn.execute(text("SELECT serial_no FROM invoices")).fetchall()
        return [row[0] for row in rows]

    def update_payment(self, serial_no: str, advance: Decimal, due: Decimal, is_paid: bool) -> None:
        self.conn.execute(
            text(
                "UPDATE invoices SET advance = :advance, due = :due, is_paid = :is_paid, "
                "updated_at = :updated_at WHERE serial_no = :serial_no"
            ),
            {
                "advance": _num(advance),
                "due": _num(due),
                "is_paid": is_paid,
                "updated_at": _now(),
                "serial_no": serial_no,
            },
        )
        self.conn.commit()

    def delete(self, serial_no: str) -> None:
        row = self._get_row(serial_no)
        if row is None:
            return
        self.conn.execute(
            text("DELETE FROM invoice_items WHERE invoice_id = :invoice_id"),
            {"invoice_id": row["id"]},
        )
        self.conn.execute(text("DELETE FROM invoices WHERE id = :id"), {"id": row["id"]})
        self.conn.commit()


class SQLAlchemyCustomerRepository(CustomerRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_customer(row: RowMapping) -> Customer:
        return Customer(
            id=row["id"],
            uuid=row["uuid"],
            name=row["name"],
            address=row["address"] or "",
            mobile=row["mobile"] or "",
            opening_balance=to_money(row["opening_balance"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def upsert(self, customer: Customer) -> Customer:
        existing = self.get_by_name(customer.name)
        now = _now()
        if existing is None:
            self.conn.execute(
                text(
                    "INSERT INTO customers (uuid, name, address, mobile, opening_balance, created_at, updated_at) "
                    "VALUES (:uuid, :name, :address, :mobile, :opening_balance, :created_at, :updated_at)"
                ),
                {
                    "uuid": str(ULID()),
                    "name": customer.name.strip(),
                    "address": customer.address,
                    "mobile": customer.mobile,
                    "opening_balance": _num(customer.opening_balance),
                    "created_at": now,
                    "updated_at": now,
                },
            )
        else:
            self.conn.execute(
                text(
                    "UPDATE customers SET address = :address, mobile = :mobile, "
                    "opening_balance = :opening_balance, updated_at = :updated_at WHERE id = :id"
                ),
                {
                    "address": customer.address,
                    "mobile": customer.mobile,
                    "opening_balance": _num(customer.opening_balance),
                    "updated_at": now,
                    "id": existing.id,
                },
            )
        self.conn.commit()
        result = self.get_by_name(customer.name)
        if result is None:
            raise RuntimeError(f"Failed to retrieve customer after upsert (name={customer.name})")
        return result

    def get_by_name(self, name: str) -> Customer | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM customers WHERE LOWER(TRIM(name)) = :name ORDER BY id LIMIT 1"),
                {"name": normalize_name(name)},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_customer(row)

    def list_all(self) -> list[Customer]:
        rows = self.conn.execute(text("SELECT * FROM customers ORDER BY name")).mappings().fetchall()
        return [self._row_to_customer(row) for row in rows]

    def delete(self, name: str) -> None:
        self.conn.execute(text("DELETE FROM customers WHERE name = :name"), {"name": name})
        self.conn.commit()


class SQLAlchemyTransactionRepository(TransactionRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_transaction(row: RowMapping) -> Transaction:
        return Transaction(
            id=row["id"],
            uuid=row["uuid"],
            customer_name=row["customer_name"],
            date=row["date"],
            description=row["description"],
            amount=to_money(row["amount"]),
            kind=TransactionKind(row["kind"]),
            created_at=row["created_at"],
        )

    def create(self, transaction: Transaction) -> Transaction:
        transaction_uuid = str(ULID())
        self.conn.execute(
            text(
                "INSERT INTO transactions (uuid, customer_name, date, description, amount, kind, created_at) "
                "VALUES (:uuid, :customer_name, :date, :description, :amount, :kind, :created_at)"
            ),
            {
                "uuid": transaction_uuid,
                "customer_name": transaction.customer_name,
                "date": _iso(transaction.date),
                "description": transaction.description,
                "amount": _num(transaction.amount),
                "kind": transaction.kind.value,
                "created_at": _now(),
            },
        )
        self.conn.commit()
        row = (
            self.conn.execute(
                text("SELECT * FROM transactions WHERE uuid = :uuid"),
                {"uuid": transaction_uuid},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            raise RuntimeError(f"Failed to retrieve transaction after create (uuid={transaction_uuid})")
        return self._row_to_transaction(row)

    def list_by_customer(self, customer_name: str) -> list[Transaction]:
        rows = (
            self.conn.execute(
                text(
                    "SELECT * FROM transactions WHERE LOWER(TRIM(customer_name)) = :name "
                    "ORDER BY date DESC, id DESC"
                ),
                {"name": normalize_name(customer_name)},
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_transaction(row) for row in rows]


class SQLAlchemyPendingItemRepository(PendingItemRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_item(row: RowMapping) -> PendingItem:
        return PendingItem(
            id=row["id"],
            customer_name=row["customer_name"],
            description=row["description"],
            quantity=_dec(row["quantity"]),
            rate=_dec(row["rate"]),
            total=to_money(row["total"]),
            created_at=row["created_at"],
        )

    def create(self, item: PendingItem) -> PendingItem:
        result = self.conn.execute(
            text(
                "INSERT INTO pending_items (customer_name, description, quantity, rate, total, created_at) "
                "VALUES (:customer_name, :description, :quantity, :rate, :total, :created_at)"
            ),
            {
                "customer_name": item.customer_name,
                "description": item.description,
                "quantity": _num(item.quantity),
                "rate": _num(item.rate),
                "total": _num(item.total),
                "created_at": _now(),
            },
        )
        item_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(item_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve pending item after create (id={item_id})")
        return created

    def get_by_id(self, item_id: int) -> PendingItem | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM pending_items WHERE id = :id"),
                {"id": item_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_item(row)

    def list_by_customer(self, customer_name: str) -> list[PendingItem]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM pending_items WHERE LOWER(TRIM(customer_name)) = :name ORDER BY id"),
                {"name": normalize_name(customer_name)},
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_item(row) for row in rows]

    def delete(self, item_id: int) -> None:
        self.conn.execute(text("DELETE FROM pending_items WHERE id = :id"), {"id": item_id})
        self.conn.commit()


class SQLAlchemyActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_entry(row: RowMapping) -> ActivityLog:
        return ActivityLog(
            id=row["id"],
            customer_name=row["customer_name"],
            date=row["date"],
            activity_type=row["activity_type"],
            description=row["description"],
            amount=to_money(row["amount"]),
            created_at=row["created_at"],
        )

    def create(self, entry: ActivityLog) -> ActivityLog:
        result = self.conn.execute(
            text(
                "INSERT INTO activity_log (customer_name, date, activity_type, description, amount, created_at) "
                "VALUES (:customer_name, :date, :activity_type, :description, :amount, :created_at)"
            ),
            {
                "customer_name": entry.customer_name,
                "date": _iso(entry.date),
                "activity_type": entry.activity_type,
                "description": entry.description,
                "amount": _num(entry.amount),
                "created_at": _now(),
            },
        )
        entry_id = result.lastrowid
        self.conn.commit()
        row = (
            self.conn.execute(
                text("SELECT * FROM activity_log WHERE id = :id"),
                {"id": entry_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            raise RuntimeError(f"Failed to retrieve activity log after create (id={entry_id})")
        return self._row_to_entry(row)

    def list_by_customer(self, customer_name: str) -> list[ActivityLog]:
        rows = (
            self.conn.execute(
                text(
                    "SELECT * FROM activity_log WHERE LOWER(TRIM(customer_name)) = :name "
                    "ORDER BY date DESC, id DESC"
                ),
                {"name": normalize_name(customer_name)},
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_entry(row) for row in rows]


class SQLAlchemyUserRepository(UserRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_user(row: RowMapping) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=row["created_at"],
        )

    def create(self, user: User) -> User:
        self.conn.execute(
            text("INSERT INTO users (email, password_hash, created_at) VALUES (:email, :password_hash, :created_at)"),
            {"email": user.email, "password_hash": user.password_hash, "created_at": _now()},
        )
        self.conn.commit()
        result = self.get_by_email(user.email)
        if result is None:
            raise RuntimeError(f"Failed to retrieve user after create (email={user.email})")
        return result

    def get_by_email(self, email: str) -> User | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM users WHERE email = :email"),
                {"email": email},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_user(row)

    def list_all(self) -> list[User]:
        rows = self.conn.execute(text("SELECT * FROM users ORDER BY created_at DESC")).mappings().fetchall()
        return [self._row_to_user(row) for row in rows]

    def update_password_hash(self, email: str, password_hash: str) -> None:
        self.conn.execute(
            text("UPDATE users SET password_hash = :password_hash WHERE email = :email"),
            {"password_hash": password_hash, "email": email},
        )
        self.conn.commit()
