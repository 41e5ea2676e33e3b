"""
Configuration management for the Flask application.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).parent.parent

DEFAULT_CORS_ORIGINS = [
    'http://localhost:3000',
    'https://certitudetech.netlify.app',
    'https://web-base-application.onrender.com',
]


def _split_env_list(value: str):
    return [item.strip() for item in (value or '').split(',') if item.strip()]


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = False
    TESTING = False

    # Storage backend: local, onedrive, s3, mongodb
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'local').lower()
    DATA_DIR = BASE_DIR / os.getenv('DATA_DIR', 'data')

    # AWS settings
    AWS_ACCESS_KEY_ID = os.getenv('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.getenv('AWS_SECRET_ACCESS_KEY')
    AWS_REGION = os.getenv('AWS_REGION', 'us-east-1')
    S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME') or os.getenv('AWS_S3_BUCKET_NAME')
    S3_PREFIX = os.getenv('S3_PREFIX', 'file-manager')

    # OneDrive settings
    ONEDRIVE_ACCESS_TOKEN = os.getenv('ONEDRIVE_ACCESS_TOKEN')
    ONEDRIVE_FOLDER = os.getenv('ONEDRIVE_FOLDER', 'FileManagerDB')
    ONEDRIVE_API_BASE = os.getenv('ONEDRIVE_API_BASE', 'https://graph.microsoft.com/v1.0/me/drive')

    # MongoDB settings
    MONGODB_URI = os.getenv('MONGODB_URI')
    MONGODB_DATABASE = os.getenv('MONGODB_DATABASE', 'file_manager')

    # Upload settings
    MAX_UPLOAD_MB = int(os.getenv('MAX_UPLOAD_MB', '50'))
    # Multipart overhead on top of the file itself
    MAX_CONTENT_LENGTH = (MAX_UPLOAD_MB + 1) * 1024 * 1024
    ALLOWED_EXCEL_MIMETYPES = {
        'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        'application/vnd.ms-excel',
        'application/vnd.ms-excel.sheet.macroEnabled.12',
    }

    # Auth settings
    TOKEN_TTL_HOURS = int(os.getenv('TOKEN_TTL_HOURS', '24'))
    USER_EMAIL_DOMAIN = os.getenv('USER_EMAIL_DOMAIN', 'certitude.com')
    DEFAULT_ADMIN_CODE = os.getenv('DEFAULT_ADMIN_CODE', 'admin')
    DEFAULT_ADMIN_PASSWORD = os.getenv('DEFAULT_ADMIN_PASSWORD', '12345678')

    # Activity logs keep this many recent entries
    LOG_RETENTION = int(os.getenv('LOG_RETENTION', '1000'))

    CORS_ORIGINS = _split_env_list(os.getenv('FRONTEND_URL', '')) + DEFAULT_CORS_ORIGINS

    REQUIRED_STORAGE_VARS = {
        'local': [],
        'onedrive': ['ONEDRIVE_ACCESS_TOKEN'],
        's3': ['S3_BUCKET_NAME'],
        'mongodb': ['MONGODB_URI'],
    }

    @classmethod
    def validate_storage_config(cls, settings=None):
        """Validate that the selected storage backend has its configuration."""
        settings = settings if settings is not None else {
            key: getattr(cls, key) for key in dir(cls) if key.isupper()
        }
        backend = settings.get('STORAGE_BACKEND', 'local')
        if backend not in cls.REQUIRED_STORAGE_VARS:
            raise ValueError(
                f"Unknown STORAGE_BACKEND '{backend}'. "
                f"Supported: {', '.join(sorted(cls.REQUIRED_STORAGE_VARS))}"
            )

        missing_vars = [var for var in cls.REQUIRED_STORAGE_VARS[backend] if not settings.get(var)]
        if missing_vars:
            raise ValueError(
                f"Missing required environment variables for '{backend}' storage: "
                f"{', '.join(missing_vars)}. Please check your .env file."
            )


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    FLASK_ENV = 'development'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    FLASK_ENV = 'production'


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    FLASK_ENV = 'testing'
    STORAGE_BACKEND = 'local'
    DEFAULT_ADMIN_PASSWORD = 'admin-password'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration based on environment."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')
    return config.get(config_name, DevelopmentConfig)
