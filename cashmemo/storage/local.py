"""Filesystem storage for exported cash memos.

Keys such as ``memos/invoice_10001.pdf`` map to files under the configured
base directory. A key that resolves outside that directory is rejected.
"""

import logging
from pathlib import Path

from cashmemo.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if not path.is_relative_to(self.base_dir):
            raise ValueError(f"Storage key outside {self.base_dir}: {key}")
        return path

    def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Saved memo %s (%d bytes) to %s", key, len(data), path)
        return str(path)

    def get(self, key: str) -> bytes:
        path = self._resolve(key)
        logger.debug("Reading memo %s from %s", key, path)
        return path.read_bytes()
