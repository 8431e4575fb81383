import pytest
from sqlalchemy import Connection

from cashmemo.repositories.sqlalchemy import (
    SQLAlchemyActivityLogRepository,
    SQLAlchemyCustomerRepository,
    SQLAlchemyInvoiceRepository,
    SQLAlchemyPendingItemRepository,
    SQLAlchemyTransactionRepository,
    SQLAlchemyUserRepository,
)


@pytest.fixture()
def invoice_repo(db_connection: Connection) -> SQLAlchemyInvoiceRepository:
    return SQLAlchemyInvoiceRepository(db_connection)


@pytest.fixture()
def customer_repo(db_connection: Connection) -> SQLAlchemyCustomerRepository:
    return SQLAlchemyCustomerRepository(db_connection)


@pytest.fixture()
def transaction_repo(db_connection: Connection) -> SQLAlchemyTransactionRepository:
    return SQLAlchemyTransactionRepository(db_connection)


@pytest.fixture()
def pending_repo(db_connection: Connection) -> SQLAlchemyPendingItemRepository:
    return SQLAlchemyPendingItemRepository(db_connection)


@pytest.fixture()
def activity_repo(db_connection: Connection) -> SQLAlchemyActivityLogRepository:
    return SQLAlchemyActivityLogRepository(db_connection)


@pytest.fixture()
def user_repo(db_connection: Connection) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db_connection)
