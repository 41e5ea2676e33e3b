#!/usr/bin/env python3
"""
Move spreadsheet payloads stored inline in file records (file_buffer) into blobs.
Run with: python -m scripts.migrate_legacy_payloads [--dry-run]
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tqdm import tqdm
from file_manager.database import get_db
from file_manager.database.files import FILES, decode_legacy_buffer
from file_manager.storage import StorageError
from file_manager.utils.validators import sanitize_filename

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Move inline file payloads into blob storage')
    parser.add_argument('--dry-run', action='store_true', help='Report without writing')
    args = parser.parse_args()

    db = get_db()
    stats = {'migrated': 0, 'undecodable': 0, 'failed': 0}

    with db.lock:
        files = db.list_files()
        legacy = [f for f in files if f.get('file_buffer') is not None]
        logger.info(f"{len(legacy)} of {len(files)} records carry an inline payload")

        for record in tqdm(legacy, desc="Payloads"):
            content = decode_legacy_buffer(record['file_buffer'])
            if content is None:
                logger.warning(f"Cannot decode payload of {record.get('id')}")
                stats['undecodable'] += 1
                continue
            if args.dry_run:
                stats['migrated'] += 1
                continue
            blob_key = f"uploads/{record['id']}/{sanitize_filename(record.get('filename'))}"
            try:
                db.store.put_blob(blob_key, content, record.get('content_type') or 'application/octet-stream')
            except StorageError as e:
                logger.error(f"Failed to store payload of {record.get('id')}: {e}")
                stats['failed'] += 1
                continue
            record['blob_key'] = blob_key
            record['file_size'] = record.get('file_size') or len(content)
            del record['file_buffer']
            stats['migrated'] += 1

        if not args.dry_run and stats['migrated']:
            db._save(FILES, files)

    logger.info(f"Done: {stats}")
    return 1 if stats['failed'] else 0


if __name__ == '__main__':
    sys.exit(main())
