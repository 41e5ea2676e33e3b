"""
Database package for the Excel file manager.

This package provides a modular database layer using mixins for different
domains on top of a storage backend (local JSON, OneDrive, S3 or MongoDB).
The Database class combines all mixins into a unified interface.

Usage:
    from file_manager.database import get_db

    db = get_db()
    file = db.get_file(file_id)
"""

from file_manager.database.base import DatabaseBase
from file_manager.database.files import FilesMixin
from file_manager.database.users import UsersMixin, UserExistsError
from file_manager.database.activity import ActivityMixin
from file_manager.database.options import OptionsMixin, OptionError
from file_manager.database.stats import StatsMixin


class Database(
    DatabaseBase,
    FilesMixin,
    UsersMixin,
    ActivityMixin,
    OptionsMixin,
    StatsMixin
):
    """
    Unified database interface combining all domain-specific mixins.

    Inherits from:
        - DatabaseBase: Store access, collection helpers, write lock
        - FilesMixin: File records and payloads (add, list, filter, remove)
        - UsersMixin: User accounts (create, update, status, delete)
        - ActivityMixin: Login and download logs, per-user activity
        - OptionsMixin: Upload form option lists
        - StatsMixin: Cached file statistics
    """
    pass


# Singleton instance for application-wide database access
_db_instance = None


def init_db(app) -> Database:
    """
    Initialize database with Flask app.

    Creates the configured store, wraps it in the singleton Database and
    seeds the default admin account when no users exist.

    Args:
        app: Flask application instance

    Returns:
        Database instance
    """
    global _db_instance
    from file_manager.storage import create_store

    store = create_store(app.config)
    _db_instance = Database(
        store,
        log_retention=app.config.get('LOG_RETENTION', 1000),
        email_domain=app.config.get('USER_EMAIL_DOMAIN', 'certitude.com')
    )
    _db_instance.ensure_default_admin(
        app.config.get('DEFAULT_ADMIN_CODE', 'admin'),
        app.config.get('DEFAULT_ADMIN_PASSWORD', '12345678')
    )
    return _db_instance


def get_db() -> Database:
    """
    Get the singleton Database instance.

    Outside an application the local store under DATA_DIR is used.

    Returns:
        Database instance
    """
    global _db_instance

    if _db_instance is None:
        from file_manager.config import get_config
        from file_manager.storage import create_store

        config_class = get_config()
        settings = {key: getattr(config_class, key) for key in dir(config_class) if key.isupper()}
        _db_instance = Database(
            create_store(settings),
            log_retention=settings['LOG_RETENTION'],
            email_domain=settings['USER_EMAIL_DOMAIN']
        )

    return _db_instance


def reset_db():
    """Reset the singleton instance (for testing)."""
    global _db_instance
    _db_instance = None


__all__ = ['Database', 'get_db', 'init_db', 'reset_db', 'UserExistsError', 'OptionError']
