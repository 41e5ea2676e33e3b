"""
Hybrid store: prefer a remote backend, always mirror writes locally.
"""
import logging
from typing import Any, Dict, Optional

from file_manager.storage.base import Store, StorageError

logger = logging.getLogger(__name__)


class HybridStore(Store):
    """
    Delegates to a primary (remote) store with a local mirror as safety net.

    Reads come from the primary and fall back to the mirror when the primary
    fails or has nothing. Writes always go to the mirror first; primary write
    failures are logged and do not fail the operation. There is no conflict
    resolution between the two copies.
    """

    def __init__(self, primary: Store, mirror: Store):
        self.primary = primary
        self.mirror = mirror
        self.name = f"{primary.name} (local mirror)"

    def _read(self, operation: str, *args) -> Optional[Any]:
        try:
            value = getattr(self.primary, operation)(*args)
        except StorageError as e:
            logger.warning(f"{self.primary.name} {operation}{args} failed, using local mirror: {e}")
            value = None
        if value is None:
            value = getattr(self.mirror, operation)(*args)
        return value

    def _write(self, operation: str, *args) -> Any:
        result = getattr(self.mirror, operation)(*args)
        try:
            primary_result = getattr(self.primary, operation)(*args)
        except StorageError as e:
            logger.error(f"{self.primary.name} {operation} failed, data kept in local mirror only: {e}")
            return result
        return result or primary_result

    def load(self, collection: str) -> Optional[Any]:
        return self._read('load', collection)

    def save(self, collection: str, data: Any) -> None:
        self._write('save', collection, data)

    def put_blob(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        self._write('put_blob', key, data, content_type)

    def get_blob(self, key: str) -> Optional[bytes]:
        return self._read('get_blob', key)

    def delete_blob(self, key: str) -> bool:
        return bool(self._write('delete_blob', key))

    def describe(self) -> Dict[str, Any]:
        primary = self.primary.describe()
        return {
            'type': self.name,
            'status': primary['status'],
            'location': primary['location'],
            'primary': primary,
            'mirror': self.mirror.describe(),
        }
