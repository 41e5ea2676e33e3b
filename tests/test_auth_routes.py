"""Tests for the /api/auth endpoints."""
import pytest

from conftest import ADMIN_CODE, ADMIN_PASSWORD, login, upload
from file_manager.database import get_db
from file_manager.services.auth_service import is_password_hash

NEW_USER = {'name': 'John Roe', 'mobile': '5550002', 'employeeCode': 'emp002', 'password': 'secret2'}


class TestRegistration:
    def test_register_then_approve_then_login(self, client, admin_headers) -> None:
        response = client.post('/api/auth/register', json=NEW_USER)
        assert response.status_code == 201
        assert response.get_json()['user'] == {'employeeCode': 'emp002', 'name': 'John Roe',
                                               'status': 'pending'}

        response = client.post('/api/auth/login', json={'employeeCode': 'emp002', 'password': 'secret2'})
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Account is not approved. Please contact administrator.'}

        response = client.post('/api/auth/approve/emp002', headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['message'] == 'User approved successfully'
        assert 'password' not in response.get_json()['user']

        response = client.post('/api/auth/login', json={'employeeCode': 'emp002', 'password': 'secret2'})
        body = response.get_json()
        assert response.status_code == 200
        assert body['message'] == 'Login successful'
        assert body['user'] == {'employeeCode': 'emp002', 'name': 'John Roe', 'role': 'user',
                                'status': 'active'}
        assert body['token'].startswith('emp002:')
        assert get_db().get_user('emp002')['lastLogin']

    def test_validation_errors(self, client) -> None:
        response = client.post('/api/auth/register', json={'employeeCode': 'emp:9', 'password': '123'})
        assert response.status_code == 400
        fields = sorted(e['field'] for e in response.get_json()['errors'])
        assert fields == ['employeeCode', 'mobile', 'name', 'password']

    def test_duplicate(self, client) -> None:
        assert client.post('/api/auth/register', json=NEW_USER).status_code == 201
        response = client.post('/api/auth/register', json=NEW_USER)
        assert response.status_code == 400
        assert response.get_json() == {'error': 'User with this employee code already exists'}


class TestLogin:
    def test_missing_fields(self, client) -> None:
        response = client.post('/api/auth/login', json={})
        assert response.status_code == 400
        assert len(response.get_json()['errors']) == 2

    @pytest.mark.parametrize('code, password, reason', [
        ('ghost', 'whatever', 'User not found'),
        (ADMIN_CODE, 'wrong-password', 'Invalid password'),
    ])
    def test_failures_are_logged(self, client, admin_headers, code, password, reason) -> None:
        response = client.post('/api/auth/login', json={'employeeCode': code, 'password': password})
        assert response.status_code == 401
        assert response.get_json() == {'error': reason}

        logs = client.get('/api/auth/logs', headers=admin_headers).get_json()['logs']
        assert logs[0]['employeeCode'] == code
        assert logs[0]['status'] == 'failed'
        assert logs[0]['reason'] == reason

    def test_legacy_plaintext_password_is_upgraded(self, client) -> None:
        db = get_db()
        db.create_user('emp003', 'placeholder', 'Old Timer', status='active')
        users = db.list_users()
        for user in users:
            if user['employeeCode'] == 'emp003':
                user['password'] = 'plain-old'
        db.store.save('users', users)

        login(client, 'emp003', 'plain-old')

        stored = db.get_user('emp003')['password']
        assert is_password_hash(stored)
        login(client, 'emp003', 'plain-old')


class TestAdministration:
    def test_admin_endpoints_reject_users(self, client, user_headers) -> None:
        for path in ('/api/auth/users', '/api/auth/stats', '/api/auth/logs',
                     '/api/auth/downloads', '/api/auth/user-stats'):
            response = client.get(path, headers=user_headers)
            assert response.status_code == 403, path

    def test_list_users_hides_passwords(self, client, admin_headers, user_headers) -> None:
        users = client.get('/api/auth/users', headers=admin_headers).get_json()['users']
        assert {u['employeeCode'] for u in users} == {ADMIN_CODE, 'emp001'}
        assert all('password' not in u for u in users)

    def test_terminated_user_token_stops_working(self, client, admin_headers, user_headers) -> None:
        response = client.post('/api/auth/terminate/emp001', headers=admin_headers)
        assert response.get_json()['message'] == 'User terminated successfully'

        response = client.get('/api/files', headers=user_headers)
        assert response.status_code == 403
        assert response.get_json() == {'error': 'Invalid or expired token'}

        client.post('/api/auth/activate/emp001', headers=admin_headers)
        assert client.get('/api/files', headers=user_headers).status_code == 200

    def test_status_change_unknown_user(self, client, admin_headers) -> None:
        response = client.post('/api/auth/reject/ghost', headers=admin_headers)
        assert response.status_code == 404

    def test_counts(self, client, admin_headers, user_headers) -> None:
        client.post('/api/auth/register', json=NEW_USER)
        counts = client.get('/api/auth/stats', headers=admin_headers).get_json()
        assert counts == {'totalUsers': 3, 'activeUsers': 2, 'pendingUsers': 1,
                          'terminatedUsers': 0, 'adminUsers': 1}

    def test_user_stats_and_downloads(self, client, admin_headers, user_headers) -> None:
        file_id = upload(client, user_headers).get_json()['file']['id']
        client.get(f'/api/files/{file_id}/download', headers=user_headers)

        downloads = client.get('/api/auth/downloads', headers=admin_headers).get_json()['downloads']
        assert downloads[0]['file_id'] == file_id

        stats = client.get('/api/auth/user-stats', headers=admin_headers).get_json()['userStats']
        jane = next(s for s in stats if s['employeeCode'] == 'emp001')
        assert jane['filesUploaded'] == 1
        assert jane['downloads'] == 1
        assert jane['logins'] == 1

    def test_update_user(self, client, admin_headers, user_headers) -> None:
        response = client.put('/api/auth/update/emp001', headers=admin_headers,
                              json={'name': 'Jane Smith', 'password': 'changed1'})
        assert response.status_code == 200
        assert response.get_json()['user']['name'] == 'Jane Smith'
        login(client, 'emp001', 'changed1')

        response = client.put('/api/auth/update/emp001', headers=admin_headers, json={'status': 'gone'})
        assert response.status_code == 400

        response = client.put('/api/auth/update/ghost', headers=admin_headers, json={'name': 'X'})
        assert response.status_code == 404

    def test_password_shaped_like_a_hash(self, client, admin_headers, user_headers) -> None:
        response = client.put('/api/auth/update/emp001', headers=admin_headers,
                              json={'password': 'scrypt:abc$def$ghi'})
        assert response.status_code == 200

        login(client, 'emp001', 'scrypt:abc$def$ghi')
        response = client.post('/api/auth/login', json={'employeeCode': 'emp001', 'password': 'secret1'})
        assert response.status_code == 401

    def test_delete_user(self, client, admin_headers, user_headers) -> None:
        response = client.delete(f'/api/auth/delete/{ADMIN_CODE}', headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Cannot delete your own account'}

        response = client.delete('/api/auth/delete/emp001', headers=admin_headers)
        assert response.status_code == 200
        assert get_db().get_user('emp001') is None
        assert client.delete('/api/auth/delete/emp001', headers=admin_headers).status_code == 404


class TestProfile:
    def test_update_own_name(self, client, user_headers) -> None:
        response = client.put('/api/auth/profile', headers=user_headers, json={'name': 'Jane Q. Doe'})
        assert response.status_code == 200
        assert response.get_json()['user']['name'] == 'Jane Q. Doe'

    def test_password_change_requires_current_password(self, client, user_headers) -> None:
        response = client.put('/api/auth/profile', headers=user_headers, json={'newPassword': 'brandnew'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Current password is required'}

        response = client.put('/api/auth/profile', headers=user_headers,
                              json={'currentPassword': 'wrong1', 'newPassword': 'brandnew'})
        assert response.get_json() == {'error': 'Current password is incorrect'}

        response = client.put('/api/auth/profile', headers=user_headers,
                              json={'currentPassword': 'secret1', 'newPassword': 'brandnew'})
        assert response.status_code == 200
        login(client, 'emp001', 'brandnew')

    def test_users_cannot_edit_others(self, client, user_headers) -> None:
        response = client.put('/api/auth/profile', headers=user_headers,
                              json={'employeeCode': ADMIN_CODE, 'name': 'Hijacked'})
        assert response.status_code == 403

    def test_admin_can_edit_others(self, client, admin_headers, user_headers) -> None:
        response = client.put('/api/auth/profile', headers=admin_headers,
                              json={'employeeCode': 'emp001', 'mobile': '5559999'})
        assert response.status_code == 200
        assert get_db().get_user('emp001')['mobile'] == '5559999'


class TestOptions:
    def test_add_and_remove_client_code(self, client, admin_headers) -> None:
        response = client.post('/api/auth/options/clientCodes', headers=admin_headers, json={'value': 'hdfc'})
        assert response.status_code == 201
        assert 'HDFC' in client.get('/api/files/options').get_json()['clientCodes']

        response = client.delete('/api/auth/options/fileTypes/SCHEME%20MASTER', headers=admin_headers)
        assert response.status_code == 200
        assert 'SCHEME MASTER' not in response.get_json()['options']['fileTypes']

    def test_option_errors(self, client, admin_headers) -> None:
        response = client.post('/api/auth/options/clientCodes', headers=admin_headers, json={'value': 'BOI'})
        assert response.status_code == 400
        response = client.post('/api/auth/options/colours', headers=admin_headers, json={'value': 'red'})
        assert response.status_code == 400
        response = client.delete('/api/auth/options/assetTypes/Crypto', headers=admin_headers)
        assert response.status_code == 404

    def test_new_file_type_is_accepted_on_upload(self, client, admin_headers) -> None:
        client.post('/api/auth/options/fileTypes', headers=admin_headers, json={'value': 'INVOICE'})
        assert upload(client, admin_headers, fileType='INVOICE').status_code == 201

    def test_requires_admin(self, client, user_headers) -> None:
        response = client.post('/api/auth/options/fileTypes', headers=user_headers, json={'value': 'X'})
        assert response.status_code == 403


def test_admin_login(client) -> None:
    headers = login(client, ADMIN_CODE, ADMIN_PASSWORD)
    assert headers['Authorization'].startswith(f'Bearer {ADMIN_CODE}:')
