"""Tests for the /api/users endpoints."""
from conftest import ADMIN_CODE
from file_manager.database import get_db


def test_list_users_newest_first(client, admin_headers, user_headers) -> None:
    response = client.get('/api/users', headers=admin_headers)
    assert response.status_code == 200
    users = response.get_json()['users']
    stamps = [u['createdAt'] for u in users]
    assert stamps == sorted(stamps, reverse=True)
    assert all('password' not in u for u in users)


def test_list_users_requires_admin(client, user_headers) -> None:
    assert client.get('/api/users', headers=user_headers).status_code == 403


def test_profile(client, user_headers) -> None:
    profile = client.get('/api/users/profile', headers=user_headers).get_json()['profile']
    assert profile['employeeCode'] == 'emp001'
    assert profile['name'] == 'Jane Doe'
    assert 'password' not in profile


def test_change_role(client, admin_headers, user_headers) -> None:
    response = client.patch('/api/users/emp001/role', headers=admin_headers, json={'role': 'admin'})
    assert response.status_code == 200
    assert response.get_json()['message'] == 'User role updated successfully'
    assert get_db().get_user('emp001')['role'] == 'admin'

    # Role is read per request, so the existing token now has admin rights
    assert client.get('/api/users', headers=user_headers).status_code == 200


def test_change_role_errors(client, admin_headers) -> None:
    response = client.patch('/api/users/emp001/role', headers=admin_headers, json={'role': 'owner'})
    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'role'

    response = client.patch(f'/api/users/{ADMIN_CODE}/role', headers=admin_headers, json={'role': 'user'})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Cannot change your own role'}

    response = client.patch('/api/users/ghost/role', headers=admin_headers, json={'role': 'user'})
    assert response.status_code == 404


def test_delete_user(client, admin_headers, user_headers) -> None:
    assert client.delete(f'/api/users/{ADMIN_CODE}', headers=admin_headers).status_code == 400
    response = client.delete('/api/users/emp001', headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json() == {'message': 'User deleted successfully'}
    assert client.delete('/api/users/emp001', headers=admin_headers).status_code == 404
