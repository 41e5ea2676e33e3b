"""
Base database operations on top of a storage backend.
"""
import threading
from typing import Any, Dict, List, Optional

from file_manager.storage import Store


class DatabaseBase:
    """Base class holding the store and collection helpers."""

    def __init__(self, store: Store, log_retention: int = 1000,
                 email_domain: str = 'certitude.com'):
        """Initialize database over an already initialized store."""
        self.store = store
        self.log_retention = log_retention
        self.email_domain = email_domain
        # Collections are read-modify-written whole, so writers are serialized
        self.lock = threading.RLock()

    def _load_list(self, collection: str) -> List[Dict[str, Any]]:
        data = self.store.load(collection)
        return data if isinstance(data, list) else []

    def _load_dict(self, collection: str) -> Optional[Dict[str, Any]]:
        data = self.store.load(collection)
        return data if isinstance(data, dict) else None

    def _save(self, collection: str, data: Any) -> None:
        self.store.save(collection, data)

    def user_email(self, employee_code: str) -> str:
        return f"{employee_code}@{self.email_domain}"

    def status(self) -> Dict[str, Any]:
        """Describe the underlying store."""
        return self.store.describe()
