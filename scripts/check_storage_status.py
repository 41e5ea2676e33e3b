#!/usr/bin/env python3
"""
Initialize the configured storage backend and print what it holds.
Run with: python -m scripts.check_storage_status
"""
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from file_manager.database import get_db
from file_manager.database.stats import compute_file_stats
from file_manager.storage import StorageError

print("=" * 80)
print("STORAGE STATUS CHECK")
print("=" * 80)

db = get_db()
print(json.dumps(db.status(), indent=2))

try:
    files = db.list_files()
    users = db.list_users()
except StorageError as e:
    print(f"[ERROR] Storage not readable: {e}")
    sys.exit(1)

print("\n### FILES ###")
stats = compute_file_stats(files)
print(f"Total files: {stats['total_files']} ({stats['total_storage']})")
for file_type, count in sorted(stats['file_type_stats'].items()):
    print(f"  {file_type}: {count}")

missing = [f for f in files if db.get_file_content(f) is None]
if missing:
    print(f"\n[WARN] {len(missing)} file record(s) without a payload:")
    for f in missing[:10]:
        print(f"  [{f.get('id')}] {f.get('filename')}")

print("\n### USERS ###")
for key, value in db.user_counts().items():
    print(f"  {key}: {value}")

print("\n[OK] Storage check completed")
