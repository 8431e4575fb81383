from cashmemo.repositories.base import (
    ActivityLogRepository,
    CustomerRepository,
    InvoiceRepository,
    PendingItemRepository,
    TransactionRepository,
    UserRepository,
)


def get_invoice_repository() -> InvoiceRepository:
    from cashmemo.db import get_connection
    from cashmemo.repositories.sqlalchemy import SQLAlchemyInvoiceRepository

    return SQLAlchemyInvoiceRepository(get_connection())


def get_customer_repository() -> CustomerRepository:
    from cashmemo.db import get_connection
    from cashmemo.repositories.sqlalchemy import SQLAlchemyCustomerRepository

    return SQLAlchemyCustomerRepository(get_connection())


def get_transaction_repository() -> TransactionRepository:
    from cashmemo.db import get_connection
    from cashmemo.repositories.sqlalchemy import SQLAlchemyTransactionRepository

    return SQLAlchemyTransactionRepository(get_connection())


def get_pending_item_repository() -> PendingItemRepository:
    from cashmemo.db import get_connection
    from cashmemo.repositories.sqlalchemy import SQLAlchemyPendingItemRepository

    return SQLAlchemyPendingItemRepository(get_connection())


def get_activity_log_repository() -> ActivityLogRepository:
    from cashmemo.db import get_connection
    from cashmemo.repositories.sqlalchemy import SQLAlchemyActivityLogRepository

    return SQLAlchemyActivityLogRepository(get_connection())


def get_user_repository() -> UserRepository:
    from cashmemo.db import get_connection
    from cashmemo.repositories.sqlalchemy import SQLAlchemyUserRepository

    return SQLAlchemyUserRepository(get_connection())
