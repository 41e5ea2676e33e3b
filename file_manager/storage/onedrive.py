"""
OneDrive storage backend using the Microsoft Graph API.

All collections and blobs live inside a single OneDrive folder. Items are
addressed by path relative to that folder, e.g. ``files.json`` or
``uploads/<id>/report.xlsx``.
"""
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from file_manager.storage.base import Store, StorageError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30


class OneDriveStore(Store):
    """Store backed by a OneDrive folder."""

    name = 'OneDrive'

    def __init__(self, access_token: str, folder: str = 'FileManagerDB',
                 api_base: str = 'https://graph.microsoft.com/v1.0/me/drive',
                 session: Optional[requests.Session] = None):
        self.access_token = access_token
        self.folder = folder
        self.api_base = api_base.rstrip('/')
        self.folder_id = None
        self.web_url = None
        self.session = session or requests.Session()

    @property
    def _headers(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.access_token}'}

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        headers = dict(self._headers)
        headers.update(kwargs.pop('headers', {}))
        try:
            return self.session.request(
                method, url, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS, **kwargs
            )
        except requests.RequestException as e:
            raise StorageError(f"OneDrive request failed: {e}")

    def _item_url(self, path: str, suffix: str = '') -> str:
        if not self.folder_id:
            raise StorageError("OneDrive not properly initialized")
        return f"{self.api_base}/items/{self.folder_id}:/{quote(path)}:{suffix}"

    def initialize(self) -> bool:
        if not self.access_token:
            logger.warning("OneDrive access token not found")
            return False
        try:
            self._ensure_folder_exists()
        except StorageError as e:
            logger.error(f"OneDrive initialization failed: {e}")
            return False
        logger.info(f"OneDrive folder ready: {self.web_url or self.folder}")
        return True

    def _ensure_folder_exists(self) -> None:
        response = self._request('GET', f"{self.api_base}/root:/{quote(self.folder)}")
        if response.status_code == 404:
            response = self._request(
                'POST',
                f"{self.api_base}/root/children",
                json={
                    'name': self.folder,
                    'folder': {},
                    '@microsoft.graph.conflictBehavior': 'rename'
                }
            )
        if not response.ok:
            raise StorageError(f"Cannot open OneDrive folder ({response.status_code}): {response.text}")
        data = response.json()
        self.folder_id = data['id']
        self.web_url = data.get('webUrl')

    def _download(self, path: str) -> Optional[bytes]:
        response = self._request('GET', self._item_url(path, '/content'))
        if response.status_code == 404:
            return None
        if not response.ok:
            raise StorageError(f"OneDrive download of {path} failed ({response.status_code})")
        return response.content

    def _upload(self, path: str, body: bytes, content_type: str) -> None:
        response = self._request(
            'PUT',
            self._item_url(path, '/content'),
            data=body,
            headers={'Content-Type': content_type}
        )
        if not response.ok:
            raise StorageError(f"OneDrive upload of {path} failed ({response.status_code})")

    def load(self, collection: str) -> Optional[Any]:
        body = self._download(f"{collection}.json")
        if body is None:
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt collection {collection} in OneDrive: {e}")

    def save(self, collection: str, data: Any) -> None:
        body = json.dumps(data, indent=2, ensure_ascii=False).encode('utf-8')
        self._upload(f"{collection}.json", body, 'application/json')

    def put_blob(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        self._upload(key, data, content_type)

    def get_blob(self, key: str) -> Optional[bytes]:
        return self._download(key)

    def delete_blob(self, key: str) -> bool:
        response = self._request('DELETE', self._item_url(key))
        if response.status_code == 404:
            return False
        if not response.ok:
            raise StorageError(f"OneDrive delete of {key} failed ({response.status_code})")
        return True

    def describe(self) -> Dict[str, Any]:
        return {
            'type': self.name,
            'status': 'Connected' if self.folder_id else 'Not initialized',
            'location': self.web_url or self.folder,
        }
