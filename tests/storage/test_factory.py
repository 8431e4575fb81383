from unittest.mock import patch

import pytest

from cashmemo.storage.factory import get_storage
from cashmemo.storage.local import LocalStorage


class TestStorageFactory:
    @patch("cashmemo.storage.factory.settings")
    def test_local_storage(self, mock_settings, tmp_path):
        mock_settings.storage_backend = "local"
        mock_settings.storage_local_path = str(tmp_path)
        assert isinstance(get_storage(), LocalStorage)

    @patch("cashmemo.storage.factory.settings")
    def test_unsupported_backend(self, mock_settings):
        mock_settings.storage_backend = "s3"
        with pytest.raises(ValueError, match="Unsupported storage backend"):
            get_storage()
