"""
User management routes.
"""
from flask import Blueprint, current_app, g, jsonify, request

from file_manager.database import get_db
from file_manager.models import Roles, public_user
from file_manager.utils.auth import role_required, token_required
from file_manager.utils.validators import ValidationError, error_response_body, validate_choice

bp = Blueprint('users', __name__, url_prefix='/api/users')


@bp.route('', methods=['GET'])
@bp.route('/', methods=['GET'])
@token_required
@role_required(Roles.ADMIN)
def list_users():
    """List users, newest first (admin only)."""
    try:
        users = sorted(get_db().list_users(), key=lambda u: u.get('createdAt') or '', reverse=True)
        return jsonify({'users': [public_user(u) for u in users]}), 200
    except Exception as e:
        current_app.logger.error(f"Get users error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch users'}), 500


@bp.route('/profile', methods=['GET'])
@token_required
def get_profile():
    """The caller's own profile."""
    try:
        user = get_db().get_user(g.current_user['id'])
        if not user:
            return jsonify({'error': 'User not found'}), 404
        return jsonify({'profile': public_user(user)}), 200
    except Exception as e:
        current_app.logger.error(f"Get profile error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch profile'}), 500


@bp.route('/<employee_code>/role', methods=['PATCH'])
@token_required
@role_required(Roles.ADMIN)
def update_role(employee_code):
    """
    Change a user's role (admin only, not your own).

    Request body:
        {"role": "admin" | "user"}
    """
    try:
        role = validate_choice((request.get_json(silent=True) or {}).get('role'), Roles.ALL, 'role')
    except ValidationError as e:
        return jsonify(error_response_body([e])), 400

    if employee_code == g.current_user['id']:
        return jsonify({'error': 'Cannot change your own role'}), 400

    try:
        user = get_db().update_user(employee_code, role=role)
        if not user:
            return jsonify({'error': 'User not found'}), 404
        current_app.logger.info(f"Role of {employee_code} set to {role} by {g.current_user['id']}")
        return jsonify({
            'message': 'User role updated successfully',
            'user': public_user(user)
        }), 200
    except Exception as e:
        current_app.logger.error(f"Update user role error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to update user role'}), 500


@bp.route('/<employee_code>', methods=['DELETE'])
@token_required
@role_required(Roles.ADMIN)
def delete_user(employee_code):
    """Delete a user (admin only, not yourself)."""
    if employee_code == g.current_user['id']:
        return jsonify({'error': 'Cannot delete your own account'}), 400
    try:
        if not get_db().delete_user(employee_code):
            return jsonify({'error': 'User not found'}), 404
        return jsonify({'message': 'User deleted successfully'}), 200
    except Exception as e:
        current_app.logger.error(f"Delete user error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to delete user'}), 500
