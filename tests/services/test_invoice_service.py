from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from cashmemo.models.customer import Customer
from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.models.transaction import Transaction, TransactionKind
from cashmemo.repositories.base import DuplicateSerialError
from cashmemo.services.invoice_service import InvoiceService, _storage_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _draft(**overrides) -> Invoice:
    defaults = dict(
        serial_no="10001",
        customer_name="Karim Traders",
        items=[InvoiceItem(description="Visiting Card", quantity=Decimal("2"), rate=Decimal("500"))],
        advance=Decimal("300"),
    )
    defaults.update(overrides)
    return Invoice(**defaults)


class TestStorageKey:
    def test_with_prefix(self):
        with patch("cashmemo.services.invoice_service.settings") as mock_settings:
            mock_settings.storage_prefix = "memos"
            assert _storage_key("10001") == "memos/invoice_10001.pdf"

    def test_without_prefix(self):
        with patch("cashmemo.services.invoice_service.settings") as mock_settings:
            mock_settings.storage_prefix = ""
            assert _storage_key("10001") == "invoice_10001.pdf"


class InvoiceServiceTestBase:
    def setup_method(self):
        self.invoice_repo = MagicMock()
        self.customer_repo = MagicMock()
        self.transaction_repo = MagicMock()
        self.storage = MagicMock()
        self.clock = FakeClock()
        self.service = InvoiceService(
            self.invoice_repo,
            self.customer_repo,
            self.transaction_repo,
            self.storage,
            clock=self.clock,
        )


class TestListing(InvoiceServiceTestBase):
    def test_list_is_cached_within_ttl(self):
        self.invoice_repo.list_all.return_value = [_draft()]

        self.service.list_invoices()
        self.clock.now += 5
        result = self.service.list_invoices()

        assert len(result) == 1
        self.invoice_repo.list_all.assert_called_once()

    def test_cache_expires(self):
        self.invoice_repo.list_all.return_value = []
        self.service.list_invoices()
        self.clock.now += 31
        self.service.list_invoices()
        assert self.invoice_repo.list_all.call_count == 2

    def test_refresh_bypasses_cache(self):
        self.invoice_repo.list_all.return_value = []
        self.service.list_invoices()
        self.service.list_invoices(refresh=True)
        assert self.invoice_repo.list_all.call_count == 2

    def test_zero_ttl_disables_cache(self):
        self.invoice_repo.list_all.return_value = []
        with patch("cashmemo.services.invoice_service.settings") as mock_settings:
            mock_settings.cache_ttl_seconds = 0
            self.service.list_invoices()
            self.service.list_invoices()
        assert self.invoice_repo.list_all.call_count == 2

    def test_mutation_invalidates_cache(self):
        self.invoice_repo.list_all.return_value = []
        self.service.list_invoices()
        self.service.delete_invoice("10001")
        self.service.list_invoices()
        assert self.invoice_repo.list_all.call_count == 2

    def test_search_by_term(self):
        self.invoice_repo.list_all.return_value = [
            _draft(serial_no="10001", customer_name="Karim Traders"),
            _draft(serial_no="10002", customer_name="Rahim Store"),
        ]
        assert [inv.serial_no for inv in self.service.search_invoices("karim")] == ["10001"]
        assert [inv.serial_no for inv in self.service.search_invoices("10002")] == ["10002"]

    def test_search_by_status(self):
        paid = _draft(serial_no="1", grand_total=Decimal("100"), advance=Decimal("100"), due=Decimal("0"))
        partial = _draft(serial_no="2", grand_total=Decimal("100"), advance=Decimal("50"), due=Decimal("50"))
        unpaid = _draft(serial_no="3", grand_total=Decimal("100"), advance=Decimal("0"), due=Decimal("100"))
        self.invoice_repo.list_all.return_value = [paid, partial, unpaid]

        assert [inv.serial_no for inv in self.service.search_invoices(status="paid")] == ["1"]
        assert [inv.serial_no for inv in self.service.search_invoices(status="unpaid")] == ["2", "3"]
        assert len(self.service.search_invoices(status="all")) == 3

    def test_search_unknown_status(self):
        with pytest.raises(ValueError, match="Unknown status filter"):
            self.service.search_invoices(status="overdue")

    def test_dashboard_summary(self):
        self.invoice_repo.list_all.return_value = [
            _draft(serial_no="1", grand_total=Decimal("100"), advance=Decimal("100"), due=Decimal("0")),
        ]
        summary = self.service.dashboard_summary(customer_count=4)
        assert summary.total_invoices == 1
        assert summary.total_customers == 4
        assert summary.total_revenue == Decimal("100.00")


class TestDrafting(InvoiceServiceTestBase):
    def test_next_serial(self):
        self.invoice_repo.list_serials.return_value = ["10001", "10002", "abc"]
        assert self.service.next_serial() == "10003"

    def test_next_serial_first_invoice(self):
        self.invoice_repo.list_serials.return_value = []
        assert self.service.next_serial() == "10001"

    def test_new_invoice(self):
        self.invoice_repo.list_serials.return_value = ["10005"]
        invoice = self.service.new_invoice()
        assert invoice.serial_no == "10006"
        assert invoice.id is None
        assert invoice.items == []

    def test_previous_due_excludes_current_invoice(self):
        self.invoice_repo.list_all.return_value = [
            _draft(serial_no="100", customer_name="Karim", due=Decimal("700")),
            _draft(serial_no="101", customer_name="karim ", due=Decimal("50")),
        ]
        self.transaction_repo.list_by_customer.return_value = [
            Transaction(customer_name="Karim", description="Cash", amount=Decimal("20"), kind=TransactionKind.DEPOSIT)
        ]
        assert self.service.previous_due("Karim", exclude_serial="100") == Decimal("30.00")

    def test_previous_due_blank_name(self):
        assert self.service.previous_due("  ") == Decimal("0.00")
        self.invoice_repo.list_all.assert_not_called()

    def test_previous_due_degrades_to_zero(self):
        self.invoice_repo.list_all.side_effect = RuntimeError("db down")
        assert self.service.previous_due("Karim") == Decimal("0.00")


class TestSaveInvoice(InvoiceServiceTestBase):
    def setup_method(self):
        super().setup_method()
        self.customer_repo.get_by_name.return_value = None
        self.invoice_repo.create.side_effect = lambda inv: inv.model_copy(update={"id": 1})
        self.invoice_repo.upsert.side_effect = lambda inv: inv

    def test_requires_customer_name(self):
        with pytest.raises(ValueError, match="Customer name is required"):
            self.service.save_invoice(_draft(customer_name="   "))
        self.invoice_repo.create.assert_not_called()
        self.customer_repo.upsert.assert_not_called()

    def test_requires_serial(self):
        with pytest.raises(ValueError, match="Invoice number is required"):
            self.service.save_invoice(_draft(serial_no=""))
        self.invoice_repo.create.assert_not_called()

    def test_new_invoice_recomputes_and_creates(self):
        result = self.service.save_invoice(_draft(customer_name="  Karim Traders "))

        created = self.invoice_repo.create.call_args[0][0]
        assert created.customer_name == "Karim Traders"
        assert created.grand_total == Decimal("1000.00")
        assert created.due == Decimal("700.00")
        assert created.is_paid is False
        assert created.in_word == "One Thousand Taka Only."
        assert result.id == 1
        self.invoice_repo.upsert.assert_not_called()

    def test_registers_customer(self):
        self.service.save_invoice(_draft(customer_address="Sakhipur", customer_mobile="01711000000"))

        customer = self.customer_repo.upsert.call_args[0][0]
        assert customer.name == "Karim Traders"
        assert customer.address == "Sakhipur"
        assert customer.mobile == "01711000000"

    def test_keeps_known_customer_details(self):
        self.customer_repo.get_by_name.return_value = Customer(
            id=3, name="Karim Traders", address="Old Address", mobile="01711000000"
        )
        self.service.save_invoice(_draft(customer_address=""))

        customer = self.customer_repo.upsert.call_args[0][0]
        assert customer.id == 3
        assert customer.address == "Old Address"

    def test_walk_in_skips_registry(self):
        self.service.save_invoice(_draft(is_walk_in=True))
        self.customer_repo.upsert.assert_not_called()
        self.invoice_repo.create.assert_called_once()

    def test_existing_invoice_upserts(self):
        self.service.save_invoice(_draft(id=7))
        self.invoice_repo.upsert.assert_called_once()
        self.invoice_repo.create.assert_not_called()

    def test_duplicate_serial_retries_with_fresh_serial(self):
        self.invoice_repo.create.side_effect = [
            DuplicateSerialError("10001"),
            _draft(id=1, serial_no="10002"),
        ]
        self.invoice_repo.list_serials.return_value = ["10001"]

        result = self.service.save_invoice(_draft())

        assert result.serial_no == "10002"
        retried = self.invoice_repo.create.call_args_list[1][0][0]
        assert retried.serial_no == "10002"

    def test_duplicate_serial_gives_up(self):
        self.invoice_repo.create.side_effect = DuplicateSerialError("10001")
        self.invoice_repo.list_serials.return_value = ["10001"]

        with pytest.raises(DuplicateSerialError):
            self.service.save_invoice(_draft())
        assert self.invoice_repo.create.call_count == 3


class TestPayments(InvoiceServiceTestBase):
    def test_update_payment(self):
        self.invoice_repo.get_by_serial.return_value = _draft(
            grand_total=Decimal("1000"), advance=Decimal("300"), due=Decimal("700")
        )

        result = self.service.update_payment("10001", Decimal("1000"))

        assert result.due == Decimal("0.00")
        assert result.is_paid is True
        self.invoice_repo.update_payment.assert_called_once_with(
            "10001", Decimal("1000.00"), Decimal("0.00"), True
        )

    def test_update_payment_not_found(self):
        self.invoice_repo.get_by_serial.return_value = None
        with pytest.raises(ValueError, match="Invoice not found"):
            self.service.update_payment("404", Decimal("10"))


class TestExportPdf(InvoiceServiceTestBase):
    def test_export_stores_pdf(self):
        self.storage.save.return_value = "/memos/memos/invoice_10001.pdf"
        with patch.object(self.service, "pdf_generator") as mock_pdf:
            mock_pdf.generate.return_value = b"%PDF-fake"
            path = self.service.export_pdf(_draft(), previous_due=Decimal("50"), include_previous_due=True)

        assert path == "/memos/memos/invoice_10001.pdf"
        mock_pdf.generate.assert_called_once()
        assert mock_pdf.generate.call_args.kwargs["include_previous_due"] is True
        key, data = self.storage.save.call_args[0]
        assert key.endswith("invoice_10001.pdf")
        assert data == b"%PDF-fake"

    def test_export_without_storage(self):
        service = InvoiceService(self.invoice_repo, self.customer_repo, self.transaction_repo)
        with pytest.raises(RuntimeError, match="Storage backend not configured"):
            service.export_pdf(_draft())
