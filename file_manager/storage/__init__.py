"""
Storage backends for the file manager.

The backend is chosen by the STORAGE_BACKEND setting. Remote backends are
always wrapped in a HybridStore with the local JSON store as mirror; when a
remote backend is misconfigured or unreachable the local store is used alone.

Usage:
    from file_manager.storage import create_store

    store = create_store(app.config)
    files = store.load('files') or []
"""
import logging
from typing import Any, Mapping

from file_manager.config import Config
from file_manager.storage.base import Store, StorageError
from file_manager.storage.hybrid import HybridStore
from file_manager.storage.local import LocalJSONStore

logger = logging.getLogger(__name__)


def _build_remote(backend: str, settings: Mapping[str, Any]) -> Store:
    # Remote clients are imported lazily so a local deployment never needs them configured
    if backend == 'onedrive':
        from file_manager.storage.onedrive import OneDriveStore
        return OneDriveStore(
            settings['ONEDRIVE_ACCESS_TOKEN'],
            folder=settings.get('ONEDRIVE_FOLDER', 'FileManagerDB'),
            api_base=settings.get('ONEDRIVE_API_BASE', 'https://graph.microsoft.com/v1.0/me/drive')
        )
    if backend == 's3':
        from file_manager.storage.s3 import S3Store
        return S3Store(
            settings['S3_BUCKET_NAME'],
            settings.get('AWS_REGION', 'us-east-1'),
            settings.get('AWS_ACCESS_KEY_ID'),
            settings.get('AWS_SECRET_ACCESS_KEY'),
            prefix=settings.get('S3_PREFIX', 'file-manager')
        )
    if backend == 'mongodb':
        from file_manager.storage.mongodb import MongoStore
        return MongoStore(settings['MONGODB_URI'], settings.get('MONGODB_DATABASE', 'file_manager'))
    raise ValueError(f"Unknown storage backend: {backend}")


def create_store(settings: Mapping[str, Any]) -> Store:
    """
    Create and initialize the configured store.

    Args:
        settings: Flask config or any mapping with the storage settings

    Returns:
        Initialized Store instance
    """
    local = LocalJSONStore(settings.get('DATA_DIR', 'data'))
    backend = (settings.get('STORAGE_BACKEND') or 'local').lower()

    if backend == 'local':
        local.initialize()
        logger.info(f"Using local database at {local.data_dir}")
        return local

    try:
        Config.validate_storage_config({**settings, 'STORAGE_BACKEND': backend})
        primary = _build_remote(backend, settings)
    except (ValueError, StorageError) as e:
        logger.warning(f"{e}. Using local database as fallback.")
        local.initialize()
        return local

    local.initialize()
    if not primary.initialize():
        logger.warning(f"{primary.name} initialization failed. Using local database as fallback.")
        return local

    hybrid = HybridStore(primary, local)
    logger.info(f"Using {hybrid.name}")
    return hybrid


__all__ = ['Store', 'StorageError', 'LocalJSONStore', 'HybridStore', 'create_store']
