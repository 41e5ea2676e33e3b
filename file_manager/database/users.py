"""User account operations mixin for database."""
import logging
from typing import Any, Dict, List, Optional

from file_manager.models import Roles, User, UserStatus
from file_manager.services.auth_service import hash_password
from file_manager.utils.formatters import utc_now_iso

logger = logging.getLogger(__name__)

USERS = 'users'


class UserExistsError(Exception):
    """Raised when registering an employee code that is already taken."""
    pass


class UsersMixin:
    """Mixin providing user CRUD operations."""

    def list_users(self) -> List[Dict[str, Any]]:
        return self._load_list(USERS)

    def get_user(self, employee_code: str) -> Optional[Dict[str, Any]]:
        """Get user by employee code."""
        return next((u for u in self.list_users() if u.get('employeeCode') == employee_code), None)

    def get_active_user(self, employee_code: str) -> Optional[Dict[str, Any]]:
        user = self.get_user(employee_code)
        if user and user.get('status') == UserStatus.ACTIVE:
            return user
        return None

    def create_user(self, employee_code: str, password: str, name: str, mobile: str = '',
                    role: str = Roles.USER, status: str = UserStatus.PENDING) -> Dict[str, Any]:
        """
        Create a user with a hashed password.

        Raises:
            UserExistsError if the employee code is taken
        """
        with self.lock:
            users = self.list_users()
            if any(u.get('employeeCode') == employee_code for u in users):
                raise UserExistsError('User with this employee code already exists')
            user = User(
                employeeCode=employee_code,
                name=name,
                mobile=mobile,
                password=hash_password(password),
                role=role,
                status=status,
                createdAt=utc_now_iso()
            ).to_dict()
            users.append(user)
            self._save(USERS, users)
        logger.info(f"Created user {employee_code} ({role}, {status})")
        return user

    def update_user(self, employee_code: str, **changes) -> Optional[Dict[str, Any]]:
        """
        Apply field changes to a user. A 'password' change is always
        treated as plaintext and hashed.

        Returns:
            Updated user, or None if not found
        """
        if changes.get('password'):
            changes['password'] = hash_password(changes['password'])
        with self.lock:
            users = self.list_users()
            for user in users:
                if user.get('employeeCode') == employee_code:
                    user.update(changes)
                    self._save(USERS, users)
                    return user
        return None

    def set_user_status(self, employee_code: str, status: str) -> Optional[Dict[str, Any]]:
        return self.update_user(employee_code, status=status)

    def delete_user(self, employee_code: str) -> Optional[Dict[str, Any]]:
        """Delete a user. Returns the removed user or None."""
        with self.lock:
            users = self.list_users()
            removed = next((u for u in users if u.get('employeeCode') == employee_code), None)
            if removed is None:
                return None
            self._save(USERS, [u for u in users if u.get('employeeCode') != employee_code])
        logger.info(f"Deleted user {employee_code}")
        return removed

    def ensure_default_admin(self, employee_code: str, password: str) -> Optional[Dict[str, Any]]:
        """Seed an active admin when no users exist yet."""
        with self.lock:
            if self.list_users():
                return None
            admin = self.create_user(
                employee_code, password, name='Administrator', mobile='1234567890',
                role=Roles.ADMIN, status=UserStatus.ACTIVE
            )
        logger.warning(f"Created default admin user '{employee_code}'; change its password")
        return admin

    def user_counts(self) -> Dict[str, int]:
        """Account totals for the admin dashboard."""
        users = self.list_users()
        return {
            'totalUsers': len(users),
            'activeUsers': sum(1 for u in users if u.get('status') == UserStatus.ACTIVE),
            'pendingUsers': sum(1 for u in users if u.get('status') == UserStatus.PENDING),
            'terminatedUsers': sum(1 for u in users if u.get('status') == UserStatus.TERMINATED),
            'adminUsers': sum(1 for u in users if u.get('role') == Roles.ADMIN),
        }
