"""
Account routes: registration, login, user administration, activity logs and options.
"""
from flask import Blueprint, current_app, g, jsonify, request

from file_manager.database import OptionError, UserExistsError, get_db
from file_manager.models import Roles, UserStatus, public_user
from file_manager.services.auth_service import issue_token, verify_password
from file_manager.storage import StorageError
from file_manager.utils.auth import role_required, token_required
from file_manager.utils.formatters import utc_now_iso
from file_manager.utils.validators import (
    ValidationError, error_response_body, require_text, validate_choice,
    validate_employee_code, validate_password
)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')

STATUS_ACTIONS = {
    'approve': (UserStatus.ACTIVE, 'approved'),
    'reject': (UserStatus.REJECTED, 'rejected'),
    'terminate': (UserStatus.TERMINATED, 'terminated'),
    'activate': (UserStatus.ACTIVE, 'activated'),
}


def _json_body():
    return request.get_json(silent=True) or {}


@bp.route('/register', methods=['POST'])
def register():
    """
    Register a new user pending admin approval.

    Request body:
        {"name": "...", "mobile": "...", "employeeCode": "...", "password": "..."}
    """
    data = _json_body()
    errors = []
    fields = {}
    for field, message in (
        ('name', 'Name is required'),
        ('mobile', 'Mobile number is required'),
        ('employeeCode', 'Employee code is required'),
    ):
        try:
            fields[field] = require_text(data, field, message)
        except ValidationError as e:
            errors.append(e)
    if 'employeeCode' in fields:
        try:
            validate_employee_code(fields['employeeCode'])
        except ValidationError as e:
            errors.append(e)
    try:
        validate_password(data.get('password'))
    except ValidationError as e:
        errors.append(e)
    if errors:
        return jsonify(error_response_body(errors)), 400

    try:
        user = get_db().create_user(
            fields['employeeCode'], data['password'], fields['name'], fields['mobile']
        )
    except UserExistsError as e:
        return jsonify({'error': str(e)}), 400
    except StorageError as e:
        current_app.logger.error(f"Registration storage error: {e}")
        return jsonify({'error': 'Failed to save user data'}), 500
    except Exception as e:
        current_app.logger.error(f"Registration error: {e}", exc_info=True)
        return jsonify({'error': 'Registration failed'}), 500

    return jsonify({
        'message': 'Registration successful. Please wait for admin approval.',
        'user': {
            'employeeCode': user['employeeCode'],
            'name': user['name'],
            'status': user['status']
        }
    }), 201


@bp.route('/login', methods=['POST'])
def login():
    """
    Log in with employee code and password.

    Returns:
        {"user": {...}, "token": "<employeeCode>:<ms>", "message": "Login successful"}
    """
    data = _json_body()
    errors = []
    for field, message in (
        ('employeeCode', 'Employee code is required'),
        ('password', 'Password is required'),
    ):
        try:
            require_text(data, field, message)
        except ValidationError as e:
            errors.append(e)
    if errors:
        return jsonify(error_response_body(errors)), 400

    employee_code = str(data['employeeCode']).strip()
    try:
        db = get_db()
        user = db.get_user(employee_code)

        def reject(reason):
            db.log_login(employee_code, 'failed', name=user.get('name') if user else None,
                         reason=reason, ip=request.remote_addr)
            return jsonify({'error': reason}), 401

        if not user:
            return reject('User not found')

        matches, needs_rehash = verify_password(user.get('password'), data['password'])
        if not matches:
            return reject('Invalid password')
        if user.get('status') != UserStatus.ACTIVE:
            return reject('Account is not approved. Please contact administrator.')

        changes = {'lastLogin': utc_now_iso()}
        if needs_rehash:
            changes['password'] = data['password']
        user = db.update_user(employee_code, **changes)
        db.log_login(employee_code, 'success', name=user.get('name'), ip=request.remote_addr)

        return jsonify({
            'user': {
                'employeeCode': user['employeeCode'],
                'name': user.get('name'),
                'role': user.get('role'),
                'status': user.get('status')
            },
            'token': issue_token(employee_code),
            'message': 'Login successful'
        }), 200
    except Exception as e:
        current_app.logger.error(f"Login error: {e}", exc_info=True)
        return jsonify({'error': 'Login failed'}), 500


@bp.route('/users', methods=['GET'])
@token_required
@role_required(Roles.ADMIN)
def get_users():
    """List all users (admin only)."""
    try:
        return jsonify({'users': [public_user(u) for u in get_db().list_users()]}), 200
    except Exception as e:
        current_app.logger.error(f"Get users error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch users'}), 500


@bp.route('/<any(approve, reject, terminate, activate):action>/<employee_code>', methods=['POST'])
@token_required
@role_required(Roles.ADMIN)
def change_status(action, employee_code):
    """Approve, reject, terminate or activate a user (admin only)."""
    status, verb = STATUS_ACTIONS[action]
    try:
        user = get_db().set_user_status(employee_code, status)
        if not user:
            return jsonify({'error': 'User not found'}), 404
        current_app.logger.info(f"User {employee_code} {verb} by {g.current_user['id']}")
        return jsonify({
            'message': f'User {verb} successfully',
            'user': public_user(user)
        }), 200
    except Exception as e:
        current_app.logger.error(f"{action.capitalize()} user error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to update user'}), 500


@bp.route('/stats', methods=['GET'])
@token_required
@role_required(Roles.ADMIN)
def get_user_counts():
    """Account totals (admin only)."""
    try:
        return jsonify(get_db().user_counts()), 200
    except Exception as e:
        current_app.logger.error(f"Get stats error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to get stats'}), 500


@bp.route('/logs', methods=['GET'])
@token_required
@role_required(Roles.ADMIN)
def get_logs():
    """Login attempts, newest first (admin only)."""
    try:
        return jsonify({'logs': get_db().get_login_logs()}), 200
    except Exception as e:
        current_app.logger.error(f"Get logs error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch logs'}), 500


@bp.route('/downloads', methods=['GET'])
@token_required
@role_required(Roles.ADMIN)
def get_downloads():
    """File downloads, newest first (admin only)."""
    try:
        return jsonify({'downloads': get_db().get_download_logs()}), 200
    except Exception as e:
        current_app.logger.error(f"Get downloads error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch downloads'}), 500


@bp.route('/user-stats', methods=['GET'])
@token_required
@role_required(Roles.ADMIN)
def get_user_stats():
    """Per-user uploads, downloads and logins (admin only)."""
    try:
        return jsonify({'userStats': get_db().user_activity_stats()}), 200
    except Exception as e:
        current_app.logger.error(f"Get user stats error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch user stats'}), 500


@bp.route('/update/<employee_code>', methods=['PUT'])
@token_required
@role_required(Roles.ADMIN)
def update_user(employee_code):
    """
    Update a user's details (admin only).

    Request body (all optional):
        {"name": "...", "mobile": "...", "password": "...", "status": "active"}
    """
    data = _json_body()
    changes = {}
    try:
        for field in ('name', 'mobile'):
            if field in data:
                changes[field] = require_text(data, field)
        if data.get('password'):
            changes['password'] = validate_password(data['password'])
        if 'status' in data:
            changes['status'] = validate_choice(data['status'], UserStatus.ALL, 'status')
    except ValidationError as e:
        return jsonify(error_response_body([e])), 400

    try:
        user = get_db().update_user(employee_code, **changes)
        if not user:
            return jsonify({'error': 'User not found'}), 404
        return jsonify({'message': 'User updated successfully', 'user': public_user(user)}), 200
    except Exception as e:
        current_app.logger.error(f"Update user error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to update user'}), 500


@bp.route('/delete/<employee_code>', methods=['DELETE'])
@token_required
@role_required(Roles.ADMIN)
def delete_user(employee_code):
    """Delete a user (admin only, not yourself)."""
    if employee_code == g.current_user['id']:
        return jsonify({'error': 'Cannot delete your own account'}), 400
    try:
        user = get_db().delete_user(employee_code)
        if not user:
            return jsonify({'error': 'User not found'}), 404
        return jsonify({'message': 'User deleted successfully', 'user': public_user(user)}), 200
    except Exception as e:
        current_app.logger.error(f"Delete user error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to delete user'}), 500


@bp.route('/profile', methods=['PUT'])
@token_required
def update_profile():
    """
    Update the caller's own profile. Admins may name another employeeCode.

    Request body:
        {"employeeCode": "...", "name": "...", "mobile": "...",
         "currentPassword": "...", "newPassword": "..."}
    """
    data = _json_body()
    employee_code = data.get('employeeCode') or g.current_user['id']
    if employee_code != g.current_user['id'] and g.current_user['role'] != Roles.ADMIN:
        return jsonify({'error': 'Insufficient permissions'}), 403

    try:
        db = get_db()
        user = db.get_user(employee_code)
        if not user:
            return jsonify({'error': 'User not found'}), 404

        changes = {}
        for field in ('name', 'mobile'):
            if field in data:
                changes[field] = require_text(data, field)
        if data.get('newPassword'):
            if not data.get('currentPassword'):
                return jsonify({'error': 'Current password is required'}), 400
            matches, _ = verify_password(user.get('password'), data['currentPassword'])
            if not matches:
                return jsonify({'error': 'Current password is incorrect'}), 400
            changes['password'] = validate_password(data['newPassword'], 'newPassword')

        user = db.update_user(employee_code, **changes)
        return jsonify({'message': 'Profile updated successfully', 'user': public_user(user)}), 200
    except ValidationError as e:
        return jsonify(error_response_body([e])), 400
    except Exception as e:
        current_app.logger.error(f"Update profile error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to update profile'}), 500


@bp.route('/options/<kind>', methods=['POST'])
@token_required
@role_required(Roles.ADMIN)
def add_option(kind):
    """Add a value to fileTypes, assetTypes or clientCodes (admin only)."""
    try:
        options = get_db().add_option(kind, _json_body().get('value'))
        return jsonify({'message': 'Option added successfully', 'options': options}), 201
    except OptionError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        current_app.logger.error(f"Add option error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to add option'}), 500


@bp.route('/options/<kind>/<path:value>', methods=['DELETE'])
@token_required
@role_required(Roles.ADMIN)
def delete_option(kind, value):
    """Remove a value from an option list (admin only)."""
    try:
        options = get_db().remove_option(kind, value)
        return jsonify({'message': 'Option removed successfully', 'options': options}), 200
    except OptionError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        current_app.logger.error(f"Delete option error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to remove option'}), 500
