from decimal import Decimal
from unittest.mock import MagicMock, patch

from cashmemo.scripts.seed import JOB_TEMPLATES, TABLES_TO_TRUNCATE, _random_advance, _random_items


class TestHelpers:
    def test_random_items_are_priced(self):
        items = _random_items()
        names = {description for description, _, _ in JOB_TEMPLATES}

        assert 1 <= len(items) <= 4
        for item in items:
            assert item.description in names
            assert item.total > 0
        assert [item.sort_order for item in items] == list(range(len(items)))

    @patch("cashmemo.scripts.seed.random.random")
    def test_random_advance(self, mock_random):
        mock_random.return_value = 0.9
        assert _random_advance(Decimal("1000.00")) == Decimal("1000.00")
        mock_random.return_value = 0.5
        assert _random_advance(Decimal("1000.00")) == Decimal("500")
        mock_random.return_value = 0.1
        assert _random_advance(Decimal("1000.00")) == Decimal("0")


class TestSeedMain:
    @patch("cashmemo.scripts.seed._create_ledger_entries")
    @patch("cashmemo.scripts.seed._create_invoices")
    @patch("cashmemo.scripts.seed._create_customers")
    @patch("cashmemo.scripts.seed.UserService")
    @patch("cashmemo.scripts.seed.get_activity_log_repository")
    @patch("cashmemo.scripts.seed.get_pending_item_repository")
    @patch("cashmemo.scripts.seed.get_transaction_repository")
    @patch("cashmemo.scripts.seed.get_customer_repository")
    @patch("cashmemo.scripts.seed.get_invoice_repository")
    @patch("cashmemo.scripts.seed.get_user_repository")
    @patch("cashmemo.scripts.seed.get_connection")
    @patch("cashmemo.scripts.seed.initialize_db")
    def test_main(
        self,
        mock_init_db,
        mock_conn,
        mock_user_repo,
        mock_invoice_repo,
        mock_customer_repo,
        mock_transaction_repo,
        mock_pending_repo,
        mock_activity_repo,
        mock_user_service,
        mock_customers,
        mock_invoices,
        mock_ledger,
    ):
        from cashmemo.scripts.seed import MAIN_EMAIL, PASSWORD, main

        mock_user_service.return_value.create_user.return_value = MagicMock(email=MAIN_EMAIL, id=1)
        mock_customers.return_value = ["Karim Traders"]
        mock_invoices.return_value = 2

        main()

        mock_init_db.assert_called_once()
        assert mock_conn.return_value.execute.call_count == len(TABLES_TO_TRUNCATE)
        mock_conn.return_value.commit.assert_called_once()
        mock_user_service.return_value.create_user.assert_called_once_with(MAIN_EMAIL, PASSWORD)
        assert mock_invoices.call_args[0][1] == ["Karim Traders"]
        assert mock_ledger.call_args[0][1] == ["Karim Traders"]
