from abc import ABC, abstractmethod
from decimal import Decimal

from cashmemo.models.activity_log import ActivityLog
from cashmemo.models.customer import Customer
from cashmemo.models.invoice import Invoice
from cashmemo.models.pending_item import PendingItem
from cashmemo.models.transaction import Transaction
from cashmemo.models.user import User


class DuplicateSerialError(Exception):
    """Raised when an INSERT collides with an existing invoice serial number."""

    def __init__(self, serial_no: str) -> None:
        super().__init__(f"Invoice serial {serial_no} already exists")
        self.serial_no = serial_no


class InvoiceRepository(ABC):
    @abstractmethod
    def create(self, invoice: Invoice) -> Invoice: ...

    @abstractmethod
    def upsert(self, invoice: Invoice) -> Invoice: ...

    @abstractmethod
    def get_by_serial(self, serial_no: str) -> Invoice | None: ...

    @abstractmethod
    def list_all(self) -> list[Invoice]: ...

    @abstractmethod
    def list_serials(self) -> list[str]: ...

    @abstractmethod
    def update_payment(self, serial_no: str, advance: Decimal, due: Decimal, is_paid: bool) -> None: ...

    @abstractmethod
    def delete(self, serial_no: str) -> None: ...


class CustomerRepository(ABC):
    @abstractmethod
    def upsert(self, customer: Customer) -> Customer: ...

    @abstractmethod
    def get_by_name(self, name: str) -> Customer | None: ...

    @abstractmethod
    def list_all(self) -> list[Customer]: ...

    @abstractmethod
    def delete(self, name: str) -> None: ...


class TransactionRepository(ABC):
    @abstractmethod
    def create(self, transaction: Transaction) -> Transaction: ...

    @abstractmethod
    def list_by_customer(self, customer_name: str) -> list[Transaction]: ...


class PendingItemRepository(ABC):
    @abstractmethod
    def create(self, item: PendingItem) -> PendingItem: ...

    @abstractmethod
    def get_by_id(self, item_id: int) -> PendingItem | None: ...

    @abstractmethod
    def list_by_customer(self, customer_name: str) -> list[PendingItem]: ...

    @abstractmethod
    def delete(self, item_id: int) -> None: ...


class ActivityLogRepository(ABC):
    @abstractmethod
    def create(self, entry: ActivityLog) -> ActivityLog: ...

    @abstractmethod
    def list_by_customer(self, customer_name: str) -> list[ActivityLog]: ...


class UserRepository(ABC):
    @abstractmethod
    def create(self, user: User) -> User: ...

    @abstractmethod
    def get_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    def list_all(self) -> list[User]: ...

    @abstractmethod
    def update_password_hash(self, email: str, password_hash: str) -> None: ...
