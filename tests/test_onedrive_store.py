"""Tests for the OneDrive store with a stubbed HTTP session."""
import json
from unittest.mock import MagicMock

import pytest
import requests

from file_manager.storage import StorageError
from file_manager.storage.onedrive import OneDriveStore

API = 'https://graph.example/drive'


def response(status_code=200, payload=None, content=b''):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = payload or {}
    resp.content = content
    resp.text = ''
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def onedrive(session):
    session.request.return_value = response(payload={'id': 'folder-1', 'webUrl': 'https://onedrive/x'})
    store = OneDriveStore('token-123', folder='FileManagerDB', api_base=API, session=session)
    assert store.initialize() is True
    session.request.reset_mock()
    return store


def test_initialize_without_token(session) -> None:
    assert OneDriveStore('', api_base=API, session=session).initialize() is False
    session.request.assert_not_called()


def test_initialize_creates_missing_folder(session) -> None:
    session.request.side_effect = [
        response(404),
        response(201, payload={'id': 'new-folder'}),
    ]
    store = OneDriveStore('token-123', api_base=API, session=session)

    assert store.initialize() is True
    assert store.folder_id == 'new-folder'
    method, url = session.request.call_args_list[1].args
    assert (method, url) == ('POST', f'{API}/root/children')
    assert session.request.call_args_list[1].kwargs['json']['name'] == 'FileManagerDB'


def test_initialize_reports_failure(session) -> None:
    session.request.side_effect = requests.ConnectionError('offline')
    assert OneDriveStore('token-123', api_base=API, session=session).initialize() is False


def test_operations_require_initialize(session) -> None:
    with pytest.raises(StorageError, match='not properly initialized'):
        OneDriveStore('token-123', api_base=API, session=session).load('files')


def test_load_parses_collection(onedrive, session) -> None:
    session.request.return_value = response(content=json.dumps([{'id': '1'}]).encode())

    assert onedrive.load('files') == [{'id': '1'}]
    method, url = session.request.call_args.args
    assert method == 'GET'
    assert url == f'{API}/items/folder-1:/files.json:/content'
    assert session.request.call_args.kwargs['headers']['Authorization'] == 'Bearer token-123'


def test_load_missing_collection(onedrive, session) -> None:
    session.request.return_value = response(404)
    assert onedrive.load('files') is None


def test_save_uploads_json(onedrive, session) -> None:
    session.request.return_value = response(201)
    onedrive.save('users', [{'employeeCode': 'emp001'}])

    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == 'PUT'
    assert url == f'{API}/items/folder-1:/users.json:/content'
    assert kwargs['headers']['Content-Type'] == 'application/json'
    assert json.loads(kwargs['data']) == [{'employeeCode': 'emp001'}]


def test_blob_paths_are_quoted(onedrive, session) -> None:
    session.request.return_value = response(200)
    onedrive.put_blob('uploads/1/Q1 report.xlsx', b'data')
    assert session.request.call_args.args[1] == f'{API}/items/folder-1:/uploads/1/Q1%20report.xlsx:/content'


def test_delete_blob(onedrive, session) -> None:
    session.request.return_value = response(204)
    assert onedrive.delete_blob('uploads/1/a.xlsx') is True
    session.request.return_value = response(404)
    assert onedrive.delete_blob('uploads/1/a.xlsx') is False


def test_server_errors_raise(onedrive, session) -> None:
    session.request.return_value = response(500)
    with pytest.raises(StorageError):
        onedrive.get_blob('uploads/1/a.xlsx')
    with pytest.raises(StorageError):
        onedrive.save('files', [])
