import os
from unittest.mock import MagicMock, patch

import cashmemo.db as db_module


class TestGetEngine:
    def test_creates_engine(self, monkeypatch):
        monkeypatch.setattr(db_module, "_engine", None)
        with patch.object(db_module, "settings") as mock_settings:
            mock_settings.db_url = "sqlite:///:memory:"
            engine = db_module.get_engine()
            assert engine is not None
            assert db_module._engine is engine

    def test_sqlite_foreign_keys_enabled(self, monkeypatch):
        from sqlalchemy import text

        monkeypatch.setattr(db_module, "_engine", None)
        with patch.object(db_module, "settings") as mock_settings:
            mock_settings.db_url = "sqlite:///:memory:"
            engine = db_module.get_engine()

        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_returns_cached_engine(self, monkeypatch):
        sentinel = MagicMock()
        monkeypatch.setattr(db_module, "_engine", sentinel)
        assert db_module.get_engine() is sentinel


class TestGetConnection:
    def test_creates_connection(self, monkeypatch):
        monkeypatch.setattr(db_module, "_connection", None)
        mock_engine = MagicMock()
        mock_conn = MagicMock()
        mock_engine.connect.return_value = mock_conn
        with patch.object(db_module, "get_engine", return_value=mock_engine):
            assert db_module.get_connection() is mock_conn

    def test_returns_cached_connection(self, monkeypatch):
        sentinel = MagicMock()
        monkeypatch.setattr(db_module, "_connection", sentinel)
        assert db_module.get_connection() is sentinel


class TestAlembicConfig:
    def test_points_at_project_alembic_dir(self):
        cfg = db_module._get_alembic_config()
        location = cfg.get_main_option("script_location")
        assert location.endswith("alembic")
        assert os.path.isdir(location)


class TestInitializeDb:
    @patch("cashmemo.db.command")
    @patch("cashmemo.db._get_alembic_config")
    def test_calls_alembic_upgrade(self, mock_config, mock_command):
        mock_cfg = MagicMock()
        mock_config.return_value = mock_cfg
        db_module.initialize_db()
        mock_command.upgrade.assert_called_once_with(mock_cfg, "head")

    def test_migrations_create_schema(self, tmp_path, monkeypatch):
        from sqlalchemy import create_engine, inspect

        url = f"sqlite:///{tmp_path / 'migrated.db'}"
        monkeypatch.setattr("cashmemo.settings.settings.db_url", url)
        db_module.initialize_db()

        tables = set(inspect(create_engine(url)).get_table_names())
        assert {
            "invoices",
            "invoice_items",
            "customers",
            "transactions",
            "pending_items",
            "activity_log",
            "users",
        } <= tables
