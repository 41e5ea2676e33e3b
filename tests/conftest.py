"""Shared fixtures for the file manager tests."""
from io import BytesIO

import pytest
from openpyxl import Workbook

from file_manager import create_app
from file_manager.database import Database, get_db, reset_db
from file_manager.models import Roles, UserStatus
from file_manager.storage import LocalJSONStore

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
ADMIN_CODE = 'admin'
ADMIN_PASSWORD = 'admin-password'


def make_xlsx(rows=None, sheets=None) -> bytes:
    """Build an .xlsx payload. `sheets` maps sheet title -> rows."""
    sheets = sheets or {'Sheet1': rows if rows is not None else [['Name', 'Value'], ['a', 1]]}
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, sheet_rows in sheets.items():
        ws = workbook.create_sheet(title)
        for row in sheet_rows:
            ws.append(row)
    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


@pytest.fixture
def store(tmp_path):
    local = LocalJSONStore(tmp_path / 'data')
    local.initialize()
    return local


@pytest.fixture
def db(store):
    return Database(store, log_retention=5)


@pytest.fixture
def app(tmp_path):
    reset_db()
    app = create_app('testing', {'DATA_DIR': tmp_path / 'app-data'})
    yield app
    reset_db()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, code, password):
    response = client.post('/api/auth/login', json={'employeeCode': code, 'password': password})
    assert response.status_code == 200, response.get_json()
    return {'Authorization': f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_CODE, ADMIN_PASSWORD)


@pytest.fixture
def user_headers(app, client):
    get_db().create_user('emp001', 'secret1', 'Jane Doe', '5550001',
                         role=Roles.USER, status=UserStatus.ACTIVE)
    return login(client, 'emp001', 'secret1')


def upload(client, headers, content=None, filename='report.xlsx', mimetype=XLSX_MIMETYPE, **fields):
    form = {
        'fileType': 'REPORT',
        'assetType': 'Equity',
        'clientCode': 'BOI',
        'fileDate': '2024-03-15',
    }
    form.update(fields)
    form = {k: v for k, v in form.items() if v is not None}
    if content is not False:
        form['file'] = (BytesIO(content if content is not None else make_xlsx()), filename, mimetype)
    return client.post('/api/files/upload', data=form, headers=headers,
                       content_type='multipart/form-data')
