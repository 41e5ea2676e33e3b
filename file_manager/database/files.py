"""File operations mixin for database."""
import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from file_manager.storage import StorageError

logger = logging.getLogger(__name__)

FILES = 'files'


def decode_legacy_buffer(buffer: Any) -> Optional[bytes]:
    """
    Decode a payload stored inline in a file record.

    Older records carry the spreadsheet either as a serialized Node Buffer
    ({"type": "Buffer", "data": [..]}) or as a base64 string.
    """
    if isinstance(buffer, dict) and isinstance(buffer.get('data'), list):
        return bytes(buffer['data'])
    if isinstance(buffer, str):
        try:
            return base64.b64decode(buffer, validate=True)
        except (binascii.Error, ValueError):
            return None
    return None


def filter_files(files: List[Dict[str, Any]], file_type: Optional[str] = None,
                 asset_type: Optional[str] = None, client_code: Optional[str] = None,
                 start_date: Optional[str] = None, end_date: Optional[str] = None,
                 search: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Filter file records. Empty filter values are ignored.

    Tag filters are exact matches, dates compare as YYYY-MM-DD strings
    (inclusive), and search is a case-insensitive filename substring.
    """
    result = list(files)
    if file_type:
        result = [f for f in result if f.get('file_type') == file_type]
    if asset_type:
        result = [f for f in result if f.get('asset_type') == asset_type]
    if client_code:
        result = [f for f in result if f.get('client_code') == client_code]
    if start_date:
        result = [f for f in result if (f.get('file_date') or '') >= start_date]
    if end_date:
        result = [f for f in result if (f.get('file_date') or '') <= end_date]
    if search:
        needle = search.lower()
        result = [f for f in result if needle in (f.get('filename') or '').lower()]
    return result


def sort_newest_first(files: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(files, key=lambda f: f.get('uploaded_at') or '', reverse=True)


class FilesMixin:
    """Mixin providing file record and payload operations."""

    def list_files(self) -> List[Dict[str, Any]]:
        """All stored file records, payload fields included."""
        return self._load_list(FILES)

    def get_file(self, file_id: str) -> Optional[Dict[str, Any]]:
        """Get file record by ID."""
        return next((f for f in self.list_files() if f.get('id') == file_id), None)

    def query_files(self, filters: Dict[str, Optional[str]], page: int = 1,
                    limit: int = 20) -> Tuple[List[Dict[str, Any]], int]:
        """
        Filter, sort newest first and paginate file records.

        Returns:
            (records on the requested page, total matching records)
        """
        matching = sort_newest_first(filter_files(self.list_files(), **filters))
        offset = (page - 1) * limit
        return matching[offset:offset + limit], len(matching)

    def add_file(self, record: Dict[str, Any], content: bytes) -> Dict[str, Any]:
        """
        Store a file's payload and append its record.

        The payload is written first; if the record cannot be saved the
        payload is removed again.
        """
        blob_key = record['blob_key']
        self.store.put_blob(blob_key, content, record.get('content_type') or 'application/octet-stream')
        with self.lock:
            try:
                files = self.list_files()
                files.append(record)
                self._save(FILES, files)
            except StorageError:
                self._discard_blob(blob_key)
                raise
            self._refresh_stats()
        logger.info(f"Added file {record['id']} ({record.get('filename')})")
        return record

    def remove_file(self, file_id: str) -> Optional[Dict[str, Any]]:
        """Remove a file record and its payload. Returns the removed record."""
        with self.lock:
            files = self.list_files()
            removed = next((f for f in files if f.get('id') == file_id), None)
            if removed is None:
                return None
            self._save(FILES, [f for f in files if f.get('id') != file_id])
            self._refresh_stats()
        if removed.get('blob_key'):
            self._discard_blob(removed['blob_key'])
        logger.info(f"Removed file {file_id} ({removed.get('filename')})")
        return removed

    def _discard_blob(self, blob_key: str) -> None:
        try:
            self.store.delete_blob(blob_key)
        except StorageError as e:
            logger.error(f"Failed to delete payload {blob_key}: {e}")

    def _refresh_stats(self) -> None:
        # The cached document is rebuilt on the next change; /stats is computed live
        try:
            self.update_stats()
        except StorageError as e:
            logger.error(f"Failed to update cached stats: {e}")

    def get_file_content(self, record: Dict[str, Any]) -> Optional[bytes]:
        """Read a record's payload from the store or from legacy inline/disk fields."""
        if record.get('blob_key'):
            content = self.store.get_blob(record['blob_key'])
            if content is not None:
                return content
        if record.get('file_path') and Path(record['file_path']).is_file():
            return Path(record['file_path']).read_bytes()
        if record.get('file_buffer') is not None:
            return decode_legacy_buffer(record['file_buffer'])
        return None
