"""
MongoDB storage backend.
"""
import logging
from typing import Any, Dict, Optional

import gridfs
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from file_manager.storage.base import Store, StorageError

logger = logging.getLogger(__name__)

COLLECTIONS_NAME = 'collections'


class MongoStore(Store):
    """
    Stores every collection as one document ``{_id: name, data: ...}`` and
    blobs in GridFS, since uploads may exceed the 16 MB document limit.
    """

    name = 'MongoDB'

    def __init__(self, uri: str, database: str = 'file_manager', client: MongoClient = None):
        self.uri = uri
        self.database_name = database
        self.client = client or MongoClient(uri, serverSelectionTimeoutMS=5000)
        self.db = self.client[database]
        self.documents = self.db[COLLECTIONS_NAME]
        self.fs = gridfs.GridFS(self.db)

    def initialize(self) -> bool:
        try:
            self.client.admin.command('ping')
        except PyMongoError as e:
            logger.error(f"MongoDB connection failed: {e}")
            return False
        logger.info(f"MongoDB connected: {self.database_name}")
        return True

    def load(self, collection: str) -> Optional[Any]:
        try:
            doc = self.documents.find_one({'_id': collection})
        except PyMongoError as e:
            raise StorageError(f"MongoDB read of {collection} failed: {e}")
        return doc['data'] if doc else None

    def save(self, collection: str, data: Any) -> None:
        try:
            self.documents.replace_one({'_id': collection}, {'_id': collection, 'data': data}, upsert=True)
        except PyMongoError as e:
            raise StorageError(f"MongoDB write of {collection} failed: {e}")

    def put_blob(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        try:
            self.delete_blob(key)
            self.fs.put(data, filename=key, contentType=content_type)
        except PyMongoError as e:
            raise StorageError(f"MongoDB blob write of {key} failed: {e}")

    def get_blob(self, key: str) -> Optional[bytes]:
        try:
            grid_out = self.fs.find_one({'filename': key})
            return grid_out.read() if grid_out else None
        except PyMongoError as e:
            raise StorageError(f"MongoDB blob read of {key} failed: {e}")

    def delete_blob(self, key: str) -> bool:
        try:
            deleted = False
            for grid_out in self.fs.find({'filename': key}):
                self.fs.delete(grid_out._id)
                deleted = True
            return deleted
        except PyMongoError as e:
            raise StorageError(f"MongoDB blob delete of {key} failed: {e}")

    def describe(self) -> Dict[str, Any]:
        return {'type': self.name, 'status': 'Connected', 'location': self.database_name}
