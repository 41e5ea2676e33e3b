"""
Local JSON file storage.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from file_manager.storage.base import Store, StorageError

logger = logging.getLogger(__name__)


class LocalJSONStore(Store):
    """Stores each collection as <data_dir>/<name>.json and blobs as plain files."""

    name = 'Local JSON Database'

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def initialize(self) -> bool:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.error(f"Cannot create data directory {self.data_dir}: {e}")
            return False

    def _collection_path(self, collection: str) -> Path:
        return self._resolve(f"{collection}.json")

    def _resolve(self, key: str) -> Path:
        root = self.data_dir.resolve()
        path = (root / key).resolve()
        if root != path and root not in path.parents:
            raise StorageError(f"Key escapes data directory: {key}")
        return path

    def _write_atomic(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write {path}: {e}")

    def load(self, collection: str) -> Optional[Any]:
        path = self._collection_path(collection)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def save(self, collection: str, data: Any) -> None:
        path = self._collection_path(collection)
        payload = json.dumps(data, indent=2, ensure_ascii=False).encode('utf-8')
        self._write_atomic(path, payload)
        logger.debug(f"Saved {collection} ({len(payload)} bytes) to {path}")

    def put_blob(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        self._write_atomic(self._resolve(key), data)

    def get_blob(self, key: str) -> Optional[bytes]:
        path = self._resolve(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read blob {key}: {e}")

    def delete_blob(self, key: str) -> bool:
        path = self._resolve(key)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete blob {key}: {e}")
        # Drop the per-file directory once it is empty
        try:
            path.parent.rmdir()
        except OSError:
            pass
        return True

    def describe(self) -> Dict[str, Any]:
        return {
            'type': self.name,
            'status': 'Connected' if self.data_dir.is_dir() else 'Unavailable',
            'location': str(self.data_dir),
        }
